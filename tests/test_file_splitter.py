"""
输入拆分与动态依赖描述生成测试
"""

import pytest

from graph import generate_count_makefile, read_total, write_makefile
from shared.file_splitter import cleanup_files, split_by_size, split_equitably


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text("".join(f"line {i} word\n" for i in range(10)), encoding="utf-8")
    return path


class TestSplitEquitably:
    def test_line_counts_differ_by_at_most_one(self, input_file, tmp_path):
        parts = split_equitably(input_file, 3, output_prefix=str(tmp_path / "part"))

        counts = [len(open(p, encoding="utf-8").readlines()) for p in parts]
        assert parts == [str(tmp_path / f"part{i}.txt") for i in (1, 2, 3)]
        assert counts == [4, 3, 3]

    def test_content_is_preserved_in_order(self, input_file, tmp_path):
        parts = split_equitably(input_file, 4, output_prefix=str(tmp_path / "p"))
        joined = "".join(open(p, encoding="utf-8").read() for p in parts)
        assert joined == input_file.read_text(encoding="utf-8")

    def test_more_parts_than_lines(self, tmp_path):
        small = tmp_path / "small.txt"
        small.write_text("only\n", encoding="utf-8")
        parts = split_equitably(small, 3, output_prefix=str(tmp_path / "part"))

        assert len(parts) == 3
        assert [open(p, encoding="utf-8").read() for p in parts] == ["only\n", "", ""]

    def test_invalid_arguments(self, input_file, tmp_path):
        with pytest.raises(ValueError):
            split_equitably(input_file, 0)
        with pytest.raises(ValueError):
            split_equitably("", 2)
        with pytest.raises(FileNotFoundError):
            split_equitably(tmp_path / "missing.txt", 2)


class TestSplitBySize:
    def test_all_content_kept(self, input_file, tmp_path):
        parts = split_by_size(input_file, 3, output_prefix=str(tmp_path / "s"))
        joined = "".join(open(p, encoding="utf-8").read() for p in parts)

        assert len(parts) == 3
        assert joined == input_file.read_text(encoding="utf-8")


class TestCleanup:
    def test_removes_files_and_ignores_missing(self, tmp_path):
        existing = tmp_path / "a.txt"
        existing.write_text("x")
        cleanup_files([existing, tmp_path / "missing.txt"])
        assert not existing.exists()


class TestGenerator:
    def test_makefile_layout(self):
        content = generate_count_makefile(["part1.txt", "part2.txt"])
        lines = content.splitlines()

        assert lines[0] == "count1.txt: part1.txt"
        assert lines[1] == "\twc -w < part1.txt > count1.txt"
        assert "total.txt: count1.txt count2.txt" in lines
        assert "\tcat count1.txt count2.txt | awk '{sum += $1} END {print sum}' > total.txt" in lines

    def test_custom_count_command(self):
        content = generate_count_makefile(["p.txt"], count_command="grep -c x {part} > {count}")
        assert "\tgrep -c x p.txt > count1.txt" in content.splitlines()

    def test_requires_parts(self):
        with pytest.raises(ValueError):
            generate_count_makefile([])

    def test_write_and_read_total(self, tmp_path):
        path = write_makefile(tmp_path / "gen" / "Makefile", "a:\n")
        assert path.read_text(encoding="utf-8") == "a:\n"

        total = tmp_path / "total.txt"
        assert read_total(total) is None
        total.write_text("42\n")
        assert read_total(total) == 42
        total.write_text("not a number\n")
        assert read_total(total) is None
