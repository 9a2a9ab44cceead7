"""
Unit tests for the FileQuery builder.

Tests root handling, each filter type, negation, depth limiting and traversal
order against an in-memory filesystem.
"""

import re
from datetime import datetime
from unittest.mock import MagicMock

import pytest

from fluentfs import DirectoryNotFoundError, FileQuery, FileQueryError
from fluentfs.filesystem import FileEntry, InMemoryFileSystem, OSFileSystem


class TestRoots:
    """Test cases for adding roots and finding unfiltered files."""

    def test_in_path_returns_all_files_in_path(self):
        """Test that a root without filters yields all of its files in order."""
        fs = InMemoryFileSystem({
            "/test/1.txt": None,
            "/test/2.txt": None,
            "/test/3.txt": None,
        })

        files = FileQuery(fs).add_root("/test/").find()

        assert files == ["/test/1.txt", "/test/2.txt", "/test/3.txt"]

    def test_in_paths_returns_files_of_all_roots(self):
        """Test that results of several roots are concatenated in root order."""
        fs = InMemoryFileSystem({
            "/test/1.txt": None,
            "/test2/1.txt": None,
        })

        files = FileQuery(fs).add_roots(["/test/", "/test2/"]).find()

        assert files == fs.all_files

    def test_root_order_is_preserved(self):
        """Test that roots are walked in the order they were added."""
        fs = InMemoryFileSystem({
            "/a/1.txt": None,
            "/b/2.txt": None,
        })

        files = FileQuery(fs).add_root("/b").add_root("/a").find()

        assert files == ["/b/2.txt", "/a/1.txt"]

    def test_missing_root_raises_directory_not_found(self):
        """Test that one missing root fails the whole query."""
        fs = InMemoryFileSystem({
            "/test/1.txt": None,
            "/test2/1.txt": None,
        })

        query = FileQuery(fs).add_roots(["/test/", "/test3/"])

        with pytest.raises(DirectoryNotFoundError) as exc_info:
            query.find()

        assert exc_info.value.path == "/test3/"
        assert isinstance(exc_info.value, FileNotFoundError)
        assert isinstance(exc_info.value, FileQueryError)

    def test_missing_root_is_detected_before_walking(self):
        """Test that no directory is enumerated when a later root is missing."""
        fs = MagicMock(wraps=InMemoryFileSystem({"/test/1.txt": None}))

        with pytest.raises(DirectoryNotFoundError):
            FileQuery(fs).add_root("/test").add_root("/missing").find()

        fs.enumerate_files.assert_not_called()

    def test_duplicates_in_one_batch_are_dropped(self):
        """Test that a root repeated within one call is searched once."""
        fs = InMemoryFileSystem({"/test/1.txt": None})

        files = FileQuery(fs).add_roots(["/test", "/test"]).find()

        assert files == ["/test/1.txt"]

    def test_duplicates_across_calls_are_kept(self):
        """Test that a root added by separate calls is searched twice."""
        fs = InMemoryFileSystem({"/test/1.txt": None})

        files = FileQuery(fs).add_root("/test").add_root("/test").find()

        assert files == ["/test/1.txt", "/test/1.txt"]

    def test_add_roots_accepts_single_string(self):
        """Test that a bare string is treated as one path."""
        fs = InMemoryFileSystem({"/test/1.txt": None})

        files = FileQuery(fs).add_roots("/test").find()

        assert files == ["/test/1.txt"]

    def test_add_roots_does_not_validate_new_roots(self):
        """Test that missing roots are only reported when the query runs."""
        fs = InMemoryFileSystem({"/test/1.txt": None})

        query = FileQuery(fs).add_root("/missing")

        with pytest.raises(DirectoryNotFoundError):
            query.find()

    def test_add_roots_rechecks_existing_roots(self, caplog):
        """Test that adding roots warns about already present missing roots."""
        fs = InMemoryFileSystem({"/test/1.txt": None})

        with caplog.at_level("WARNING", logger="fluentfs.query"):
            FileQuery(fs).add_root("/missing").add_root("/test")

        assert "Search root does not exist: /missing" in caplog.text

    def test_no_roots_returns_empty_list(self):
        """Test that a query without roots finds nothing."""
        assert FileQuery(InMemoryFileSystem()).find() == []

    def test_directories_are_not_returned(self):
        """Test that empty directories never appear in the results."""
        fs = InMemoryFileSystem({"/test/1.txt": None})
        fs.add_directory("/test/empty")

        assert FileQuery(fs).add_root("/test").find() == ["/test/1.txt"]

    def test_default_file_system_is_os(self):
        """Test that the OS filesystem is used when none is given."""
        assert isinstance(FileQuery().file_system, OSFileSystem)


class TestTraversal:
    """Test cases for traversal order and depth limits."""

    def setup_method(self):
        """Set up a three level tree."""
        self.fs = InMemoryFileSystem({
            "/root/a.txt": None,
            "/root/sub1/b.txt": None,
            "/root/sub1/deep/c.txt": None,
            "/root/sub2/d.txt": None,
            "/root/z.txt": None,
        })

    def test_files_before_subdirectories(self):
        """Test pre-order: a directory's files come before its subdirectories."""
        files = FileQuery(self.fs).add_root("/root").find()

        assert files == [
            "/root/a.txt",
            "/root/z.txt",
            "/root/sub1/b.txt",
            "/root/sub1/deep/c.txt",
            "/root/sub2/d.txt",
        ]

    def test_max_depth_zero_returns_root_files_only(self):
        """Test that depth 0 never descends into subdirectories."""
        files = FileQuery(self.fs).add_root("/root").with_max_depth(0).find()

        assert files == ["/root/a.txt", "/root/z.txt"]

    def test_max_depth_one(self):
        """Test that depth 1 descends exactly one level."""
        files = FileQuery(self.fs).add_root("/root").with_max_depth(1).find()

        assert files == [
            "/root/a.txt",
            "/root/z.txt",
            "/root/sub1/b.txt",
            "/root/sub2/d.txt",
        ]

    def test_max_depth_zero_does_not_enumerate_subdirectories(self):
        """Test that subdirectories are not listed when descent is not allowed."""
        fs = MagicMock(wraps=self.fs)

        FileQuery(fs).add_root("/root").with_max_depth(0).find()

        fs.enumerate_directories.assert_not_called()

    def test_max_depth_none_restores_unbounded(self):
        """Test that a None limit walks the whole tree."""
        files = (FileQuery(self.fs)
                 .add_root("/root")
                 .with_max_depth(0)
                 .with_max_depth(None)
                 .find())

        assert len(files) == 5

    def test_negative_max_depth_rejected(self):
        """Test that negative depth limits are rejected."""
        with pytest.raises(ValueError, match="cannot be negative"):
            FileQuery(self.fs).with_max_depth(-1)

    def test_non_integer_max_depth_rejected(self):
        """Test that non-integer depth limits are rejected."""
        with pytest.raises(TypeError):
            FileQuery(self.fs).with_max_depth(1.5)

    def test_deep_tree_does_not_exhaust_stack(self):
        """Test that very deep trees are walked without recursion errors."""
        path = "/deep" + "/d" * 1100
        fs = InMemoryFileSystem({path + "/leaf.txt": None})

        assert FileQuery(fs).add_root("/deep").find() == [path + "/leaf.txt"]

    def test_enumeration_error_propagates(self):
        """Test that a failing directory read aborts the query."""
        fs = MagicMock(wraps=self.fs)
        fs.enumerate_directories.side_effect = PermissionError("denied")

        with pytest.raises(PermissionError):
            FileQuery(fs).add_root("/root").find()

    def test_metadata_read_error_propagates(self):
        """Test that a failing metadata read aborts the query."""
        fs = MagicMock(wraps=self.fs)
        fs.get_file_length.side_effect = PermissionError("denied")

        with pytest.raises(PermissionError):
            FileQuery(fs).add_root("/root").where_size(lambda size: size > 0).find()

    def test_find_walks_again_each_time(self):
        """Test that results are not cached between runs."""
        query = FileQuery(self.fs).add_root("/root").with_max_depth(0)
        assert query.find() == ["/root/a.txt", "/root/z.txt"]

        self.fs.add_file("/root/new.txt")

        assert query.find() == ["/root/a.txt", "/root/z.txt", "/root/new.txt"]

    def test_stats_tracking(self):
        """Test that statistics describe the last run."""
        query = FileQuery(self.fs).add_root("/root").with_extension("txt").matching("^[ab]")
        query.find()

        stats = query.get_stats()
        assert stats['roots_searched'] == 1
        assert stats['directories_traversed'] == 4
        assert stats['files_scanned'] == 5
        assert stats['files_matched'] == 2

        query.reset_stats()
        assert query.get_stats()['files_scanned'] == 0


class TestExtensionFilter:
    """Test cases for the extension filter."""

    def setup_method(self):
        """Set up files with mixed extensions."""
        self.fs = InMemoryFileSystem({
            "/1.txt": None,
            "/2.txt": None,
            "/3.etc": None,
        })

    def test_extension_with_dot(self):
        """Test matching an extension given with its dot."""
        files = FileQuery(self.fs).add_root("/").with_extension(".txt").find()

        assert files == ["/1.txt", "/2.txt"]

    def test_extension_without_dot(self):
        """Test that a missing dot is added to the extension."""
        files = FileQuery(self.fs).add_root("/").with_extension("txt").find()

        assert files == ["/1.txt", "/2.txt"]

    def test_extension_is_case_insensitive(self):
        """Test that extension case is ignored on both sides."""
        self.fs.add_file("/4.TXT")

        files = FileQuery(self.fs).add_root("/").with_extension("Txt").find()

        assert files == ["/1.txt", "/2.txt", "/4.TXT"]

    def test_multiple_extensions(self):
        """Test that any of several extensions matches."""
        files = FileQuery(self.fs).add_root("/").with_extension(["etc", ".txt"]).find()

        assert files == ["/1.txt", "/2.txt", "/3.etc"]

    def test_file_without_extension_does_not_match(self):
        """Test that files without an extension are excluded."""
        self.fs.add_file("/README")

        files = FileQuery(self.fs).add_root("/").with_extension("txt").find()

        assert "/README" not in files


class TestNameFilter:
    """Test cases for the regular expression name filter."""

    def setup_method(self):
        self.fs = InMemoryFileSystem({
            "/logs/app.log": None,
            "/logs/app.log.1": None,
            "/logs/error.log": None,
        })

    def test_matching_string_pattern(self):
        """Test matching a pattern given as a string."""
        files = FileQuery(self.fs).add_root("/logs").matching(r"^app").find()

        assert files == ["/logs/app.log", "/logs/app.log.1"]

    def test_matching_compiled_pattern(self):
        """Test matching a precompiled pattern with its flags."""
        pattern = re.compile(r"^ERROR", re.IGNORECASE)

        files = FileQuery(self.fs).add_root("/logs").matching(pattern).find()

        assert files == ["/logs/error.log"]

    def test_matching_uses_file_name_only(self):
        """Test that the directory part is not matched."""
        files = FileQuery(self.fs).add_root("/logs").matching("logs").find()

        assert files == []

    def test_matching_includes_extension(self):
        """Test that the extension is part of the matched name."""
        files = FileQuery(self.fs).add_root("/logs").matching(r"\.log$").find()

        assert files == ["/logs/app.log", "/logs/error.log"]


class TestMetadataFilters:
    """Test cases for size and timestamp filters."""

    def setup_method(self):
        self.old = datetime(2020, 1, 1)
        self.new = datetime(2024, 6, 1)
        self.fs = InMemoryFileSystem({
            "/1.txt": FileEntry(contents="1"),
            "/2.txt": None,
            "/3.etc": None,
        })

    def test_where_size(self):
        """Test filtering on file length."""
        files = FileQuery(self.fs).add_root("/").where_size(lambda size: size == 1).find()

        assert files == ["/1.txt"]

    def test_where_last_write_time(self):
        """Test filtering on last write time."""
        fs = InMemoryFileSystem({
            "/old.txt": FileEntry().with_last_write_time(self.old),
            "/new.txt": FileEntry().with_last_write_time(self.new),
        })

        files = FileQuery(fs).add_root("/").where_last_write_time(lambda t: t.year > 2022).find()

        assert files == ["/new.txt"]

    def test_where_last_accessed_time(self):
        """Test filtering on last access time."""
        fs = InMemoryFileSystem({
            "/old.txt": FileEntry().with_last_access_time(self.old),
            "/new.txt": FileEntry().with_last_access_time(self.new),
        })

        files = FileQuery(fs).add_root("/").where_last_accessed_time(lambda t: t < self.new).find()

        assert files == ["/old.txt"]

    def test_where_creation_time(self):
        """Test filtering on creation time."""
        fs = InMemoryFileSystem({
            "/old.txt": FileEntry().with_creation_time(self.old),
            "/new.txt": FileEntry().with_creation_time(self.new),
        })

        files = FileQuery(fs).add_root("/").where_creation_time(lambda t: t == self.new).find()

        assert files == ["/new.txt"]

    def test_filters_are_combined_with_and(self):
        """Test that a file must pass every filter."""
        files = (FileQuery(self.fs)
                 .add_root("/")
                 .with_extension("txt")
                 .where_size(lambda size: size == 0)
                 .find())

        assert files == ["/2.txt"]

    def test_metadata_is_read_lazily(self):
        """Test that timestamps are only read when a filter needs them."""
        fs = MagicMock(wraps=self.fs)

        FileQuery(fs).add_root("/").where_size(lambda size: True).find()

        fs.get_last_write_time.assert_not_called()
        fs.get_last_access_time.assert_not_called()
        fs.get_creation_time.assert_not_called()
        assert fs.get_file_length.call_count == 3

    def test_predicate_errors_propagate(self):
        """Test that exceptions raised by predicates reach the caller."""
        def explode(size):
            raise RuntimeError("predicate failed")

        with pytest.raises(RuntimeError, match="predicate failed"):
            FileQuery(self.fs).add_root("/").where_size(explode).find()


class TestNegation:
    """Test cases for negated queries."""

    def setup_method(self):
        self.fs = InMemoryFileSystem({
            "/a.txt": FileEntry(contents="x"),
            "/b.txt": None,
            "/c.etc": FileEntry(contents="x"),
            "/d.etc": None,
        })

    def test_negate_single_filter_returns_complement(self):
        """Test that negating one filter returns exactly the other files."""
        everything = FileQuery(self.fs).add_root("/").find()
        matching = FileQuery(self.fs).add_root("/").with_extension("txt").find()

        negated = FileQuery(self.fs).add_root("/").with_extension("txt").negate().find()

        assert negated == [f for f in everything if f not in matching]

    def test_negate_multiple_filters_requires_all_to_fail(self):
        """Test that each filter is inverted before the AND."""
        files = (FileQuery(self.fs)
                 .add_root("/")
                 .with_extension("txt")
                 .where_size(lambda size: size == 1)
                 .negate()
                 .find())

        # Not "not (txt and size 1)", which would also keep b.txt and c.etc
        assert files == ["/d.etc"]

    def test_negate_applies_to_later_filters(self):
        """Test that negation applies regardless of call order."""
        files = FileQuery(self.fs).add_root("/").negate().with_extension("etc").find()

        assert files == ["/a.txt", "/b.txt"]

    def test_negate_twice_stays_negated(self):
        """Test that negate sets the flag rather than toggling it."""
        files = FileQuery(self.fs).add_root("/").with_extension("txt").negate().negate().find()

        assert files == ["/c.etc", "/d.etc"]

    def test_negate_without_filters_returns_everything(self):
        """Test that an empty filter set accepts everything even when negated."""
        files = FileQuery(self.fs).add_root("/").negate().find()

        assert files == self.fs.all_files


class TestBuildPlan:
    """Test cases for snapshotting the builder state."""

    def test_plan_reflects_builder_state(self):
        """Test that the plan carries roots, filters, negation and depth."""
        query = (FileQuery(InMemoryFileSystem())
                 .add_roots(["/a", "/b"])
                 .with_extension("txt")
                 .negate()
                 .with_max_depth(2))

        plan = query.build_plan()

        assert plan.roots == ("/a", "/b")
        assert len(plan.filters) == 1
        assert plan.negate is True
        assert plan.max_depth == 2

    def test_plan_is_not_affected_by_later_changes(self):
        """Test that later builder calls leave an earlier plan untouched."""
        query = FileQuery(InMemoryFileSystem()).add_root("/a")
        plan = query.build_plan()

        query.add_root("/b").with_extension("txt").negate()

        assert plan.roots == ("/a",)
        assert plan.filters == ()
        assert plan.negate is False
