from dbcli.render import column_labels, render_result_set, render_update_count


def test_result_set_layout():
    text = render_result_set(["id", "name"], [(1, "a"), (2, None)])
    assert text.splitlines() == [
        "Results:",
        "",
        "*************************** 1. row ***************************",
        "id: 1",
        "name: a",
        "",
        "*************************** 2. row ***************************",
        "id: 2",
        "name: None",
        "",
        "2 rows in set.",
    ]


def test_empty_result_set():
    assert render_result_set(["id"], []).splitlines()[-1] == "0 rows in set."


def test_update_count():
    assert render_update_count(3) == "Update count: 3"


def test_column_labels():
    assert column_labels([("a", 1), ("b", 2)]) == ["a", "b"]
    assert column_labels(None) == []
