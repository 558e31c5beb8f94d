import io
import sys
import unittest
from pathlib import Path


def _add_aurup_path():
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_add_aurup_path()

from printer import Printer  # noqa: E402
from shared import UpgradeCheckError  # noqa: E402
from sources import UpgradeRecord  # noqa: E402
from upgrade import (  # noqa: E402
    MenuLayout,
    format_upgrade_line,
    menu_rows,
    number_records,
    render_menu,
)

LOCAL = {
    "linux": "6.9.1.arch1-1",
    "neovim-git": "0.10.0.r12-1",
}


def sample():
    return number_records(
        [UpgradeRecord("linux", "repo", "core", "6.9.2.arch1-1")],
        [UpgradeRecord("yay", "aur", "aur", "12.3.5-1", old_version="12.3.1-1")],
        [UpgradeRecord("neovim-git", "devel", "devel", "latest-commit")],
    )


def tag(style, text):
    return f"<{style}:{text}>"


class MenuLayoutTests(unittest.TestCase):
    def test_widths(self):
        layout = MenuLayout.compute(menu_rows(sample(), LOCAL.get))
        self.assertEqual(layout.total, 3)
        self.assertEqual(layout.index_width, 1)
        self.assertEqual(layout.label_width, len("devel/neovim-git"))
        self.assertEqual(layout.old_width, len("6.9.1.arch1-1"))

    def test_index_width_grows_with_total(self):
        repo = [UpgradeRecord(f"pkg{i:02d}", "repo", "extra", "2-1") for i in range(12)]
        aggregated = number_records(repo, [], [])
        rows = menu_rows(aggregated, lambda name: "1-1")
        layout = MenuLayout.compute(rows)
        self.assertEqual(layout.index_width, 2)
        self.assertTrue(format_upgrade_line(rows[-1], layout).startswith(" 1 extra/pkg11"))

    def test_wide_characters_count_as_two_columns(self):
        aggregated = number_records(
            [UpgradeRecord("ターミナル", "repo", "extra", "2-1"), UpgradeRecord("vim", "repo", "extra", "2-1")],
            [],
            [],
        )
        rows = menu_rows(aggregated, lambda name: "1-1")
        layout = MenuLayout.compute(rows)
        self.assertEqual(layout.label_width, len("extra/") + 10)


class FormatLineTests(unittest.TestCase):
    def setUp(self):
        self.rows = menu_rows(sample(), LOCAL.get)
        self.layout = MenuLayout.compute(self.rows)

    def test_plain_lines_are_aligned(self):
        lines = [format_upgrade_line(row, self.layout) for row in self.rows]
        self.assertEqual(lines, [
            "3 core/linux        6.9.1.arch1-1 -> 6.9.2.arch1-1",
            "2 aur/yay           12.3.1-1      -> 12.3.5-1",
            "1 devel/neovim-git  0.10.0.r12-1  -> latest-commit",
        ])

    def test_versions_are_diffed(self):
        line = format_upgrade_line(self.rows[1], self.layout, tag)
        self.assertIn("12.3.<old_version:1-1>", line)
        self.assertIn("-> 12.3.<new_version:5-1>", line)
        self.assertTrue(line.startswith("<number_menu:2> <repo:aur>/<bold:yay>"))

    def test_devel_versions_painted_whole(self):
        line = format_upgrade_line(self.rows[2], self.layout, tag)
        self.assertIn("<old_version:0.10.0.r12-1>", line)
        self.assertTrue(line.endswith("-> <new_version:latest-commit>"))

    def test_old_version_looked_up_for_repo(self):
        self.assertEqual(self.rows[0].old_version, "6.9.1.arch1-1")
        self.assertEqual(self.rows[1].old_version, "12.3.1-1")

    def test_missing_local_package_is_an_error(self):
        with self.assertRaises(UpgradeCheckError) as ctx:
            menu_rows(sample(), {"linux": "6.9.1.arch1-1"}.get)
        self.assertIn("devel/neovim-git", str(ctx.exception))


class RenderMenuTests(unittest.TestCase):
    def test_prints_from_n_down_to_one(self):
        out = io.StringIO()
        printer = Printer(use_plain=True, file=out, err_file=io.StringIO())
        rows = render_menu(sample(), LOCAL.get, printer)

        self.assertEqual([r.index for r in rows], [3, 2, 1])
        lines = out.getvalue().splitlines()
        self.assertEqual([line.split()[1] for line in lines], ["core/linux", "aur/yay", "devel/neovim-git"])
        self.assertEqual(lines[0], "3 core/linux        6.9.1.arch1-1 -> 6.9.2.arch1-1")

    def test_brackets_in_names_print_literally(self):
        out = io.StringIO()
        printer = Printer(use_plain=True, file=out, err_file=io.StringIO())
        aggregated = number_records([UpgradeRecord("[weird]", "repo", "extra", "1.[2]-1")], [], [])
        render_menu(aggregated, {"[weird]": "1.[1]-1"}.get, printer)
        self.assertEqual(out.getvalue().strip(), "1 extra/[weird]  1.[1]-1 -> 1.[2]-1")


if __name__ == "__main__":
    unittest.main()
