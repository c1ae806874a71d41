"""Tests for task tree construction."""

from datetime import date

from todo_md.parser import parse_document
from todo_md.tree import build_tree, flatten

TODAY = date(2018, 1, 1)


def parse(lines, config):
    return parse_document(lines, config=config, target_date=TODAY).tree


class TestBuildTree:
    """Nesting by indentation."""

    def test_simple_nesting(self, config):
        tree = parse([
            "Parent",
            "    Child 1",
            "        Grandchild",
            "    Child 2",
            "Second root",
        ], config)

        assert [task.line_number for task in tree.roots] == [0, 4]
        assert tree.get(0).subtask_ids == (1, 3)
        assert tree.get(1).subtask_ids == (2,)
        assert tree.get(2).parent_id == 1
        assert tree.get(3).parent_id == 0
        assert tree.get(4).parent_id is None

    def test_preorder_reproduces_document_order(self, config):
        lines = [
            "A",
            "    B",
            "        C",
            "    D",
            "E",
            "    F",
        ]
        tree = parse(lines, config)

        assert [task.title for task in flatten(tree)] == ["A", "B", "C", "D", "E", "F"]
        assert [task.line_number for task in tree.walk()] == [task.line_number for task in tree.flat]

    def test_over_indented_line_is_clamped(self, config):
        tree = parse([
            "Parent",
            "            Deep child",
            "    Sibling",
        ], config)

        deep = tree.get(1)
        assert deep.parent_id == 0
        assert deep.indent_level == 1
        assert tree.get(2).parent_id == 0
        assert tree.get(0).subtask_ids == (1, 2)

    def test_first_line_indented_is_a_root(self, config):
        tree = parse([
            "        Orphan",
            "Root",
        ], config)

        assert tree.get(0).parent_id is None
        assert tree.get(0).indent_level == 0
        assert [task.line_number for task in tree.roots] == [0, 1]

    def test_dedent_to_intermediate_level(self, config):
        tree = parse([
            "A",
            "        B",
            "    C",
        ], config)

        # B is clamped under A; C (level 1) pops B (measured level 2)
        assert tree.get(2).parent_id == 0

    def test_parent_links_are_consistent(self, config):
        tree = parse([
            "A",
            "    B",
            "    C",
            "        D",
            "E",
        ], config)

        for task in tree.flat:
            for child_id in task.subtask_ids:
                assert tree.get(child_id).parent_id == task.line_number
            if task.parent_id is not None:
                assert task.line_number in tree.get(task.parent_id).subtask_ids

    def test_line_numbers_skip_comments(self, config):
        tree = parse([
            "A",
            "# comment",
            "    B",
        ], config)

        assert tree.get(0).subtask_ids == (2,)

    def test_empty_document(self, config):
        tree = parse("", config)

        assert tree.roots == ()
        assert tree.flat == ()
        assert tree.tags == {}
        assert flatten(tree) == []

    def test_build_tree_of_nothing(self):
        assert build_tree([]).roots == ()


class TestTreeQueries:
    """Lookups on a built tree."""

    def setup_tree(self, config):
        return parse([
            "Plan trip +travel",
            "    Book flight +travel @laptop",
            "        Compare prices #cheap",
            "    Pack #cheap",
            "Call mom @phone",
        ], config)

    def test_indexes(self, config):
        tree = self.setup_tree(config)

        assert tree.projects == {"travel": (0, 1)}
        assert tree.contexts == {"laptop": (1,), "phone": (4,)}
        assert tree.tags == {"cheap": (2, 3)}

    def test_nested_ids(self, config):
        tree = self.setup_tree(config)

        assert tree.nested_ids(tree.get(0)) == [1, 2, 3]
        assert tree.nested_ids(tree.get(4)) == []

    def test_ancestors(self, config):
        tree = self.setup_tree(config)

        assert [task.line_number for task in tree.ancestors(tree.get(2))] == [1, 0]
        assert tree.ancestors(tree.get(0)) == []

    def test_parent_and_subtasks(self, config):
        tree = self.setup_tree(config)

        assert tree.parent(tree.get(3)).line_number == 0
        assert [task.title for task in tree.subtasks(tree.get(0))] == ["Book flight", "Pack"]

    def test_filter_and_tasks_for(self, config):
        tree = self.setup_tree(config)

        assert [task.line_number for task in tree.filter(lambda task: "cheap" in task.tags)] == [2, 3]
        assert [task.title for task in tree.tasks_for(tree.contexts["phone"])] == ["Call mom"]
