"""tests for the conversation merge."""

from dualchat.core.models import ChatConversation, Purpose, Sender, StoredChatMessage
from dualchat.core.reconcile import merge_conversations, merge_with_report, wins


def _msg(msg_id: str) -> StoredChatMessage:
    return StoredChatMessage(
        id=msg_id,
        text=msg_id,
        sender=Sender.USER,
        purpose=Purpose.USER_INPUT,
        timestamp="2024-01-01T00:00:00Z",
    )


def _conv(conv_id: str, updated_at: str, messages: int = 0, title: str = "") -> ChatConversation:
    return ChatConversation(
        id=conv_id,
        title=title or conv_id,
        created_at="2024-01-01T00:00:00Z",
        updated_at=updated_at,
        messages=[_msg(f"m{i}") for i in range(messages)],
    )


def test_collision_later_updated_at_wins() -> None:
    """the incoming record with a later updatedAt replaces the existing one."""
    existing = [_conv("x", "2024-01-01T00:00:00Z", messages=1, title="old")]
    incoming = [_conv("x", "2024-06-01T00:00:00Z", messages=2, title="new")]

    result = merge_conversations(existing, incoming)

    assert len(result) == 1
    assert result[0] is incoming[0]


def test_collision_earlier_incoming_loses() -> None:
    """an older incoming record is discarded."""
    existing = [_conv("x", "2024-06-01T00:00:00Z", title="newer")]
    incoming = [_conv("x", "2024-01-01T00:00:00Z", messages=5, title="older")]

    result = merge_conversations(existing, incoming)

    assert result == existing


def test_collision_equal_timestamps_incoming_wins() -> None:
    """later-or-equal means ties go to the record processed second."""
    existing = [_conv("x", "2024-01-01T00:00:00Z", title="first")]
    incoming = [_conv("x", "2024-01-01T00:00:00Z", title="second")]

    assert merge_conversations(existing, incoming)[0].title == "second"


def test_replacement_is_total() -> None:
    """the loser's extra messages are not unioned into the winner."""
    existing = [_conv("x", "2024-01-01T00:00:00Z", messages=3)]
    incoming = [_conv("x", "2024-02-01T00:00:00Z", messages=1)]

    result = merge_conversations(existing, incoming)

    assert len(result[0].messages) == 1


def test_unparseable_timestamp_falls_back_to_message_count() -> None:
    """with an invalid timestamp the longer message list wins."""
    longer = _conv("x", "garbage", messages=3, title="longer")
    shorter = _conv("x", "2024-06-01T00:00:00Z", messages=1, title="shorter")

    assert merge_conversations([longer], [shorter])[0].title == "longer"
    assert merge_conversations([shorter], [longer])[0].title == "longer"


def test_wins_fallback_tie_goes_to_candidate() -> None:
    """equal message counts with bad timestamps favour the candidate."""
    assert wins(_conv("x", "bad", 2), _conv("x", "also bad", 2)) is True


def test_result_sorted_newest_first() -> None:
    """merged output is ordered by updatedAt descending."""
    result = merge_conversations(
        [_conv("a", "2024-01-01T00:00:00Z"), _conv("b", "2024-03-01T00:00:00Z")],
        [_conv("c", "2024-02-01T00:00:00Z")],
    )
    assert [c.id for c in result] == ["b", "c", "a"]


def test_sort_ties_keep_input_order() -> None:
    """equal timestamps keep first-seen order; unparseable sort last."""
    result = merge_conversations(
        [_conv("bad", "nope"), _conv("a", "2024-01-01T00:00:00Z")],
        [_conv("b", "2024-01-01T00:00:00Z")],
    )
    assert [c.id for c in result] == ["a", "b", "bad"]


def test_disjoint_merge_is_commutative() -> None:
    """merge(A, B) and merge(B, A) agree for disjoint ids."""
    a = [_conv("a1", "2024-01-01T00:00:00Z"), _conv("a2", "2024-05-01T00:00:00Z")]
    b = [_conv("b1", "2024-03-01T00:00:00Z")]

    forward = {c.id: c for c in merge_conversations(a, b)}
    backward = {c.id: c for c in merge_conversations(b, a)}

    assert forward.keys() == backward.keys()
    assert all(forward[k] is backward[k] for k in forward)


def test_duplicates_within_one_side_are_resolved() -> None:
    """duplicate ids inside a single input are deduplicated too."""
    result = merge_conversations(
        [_conv("x", "2024-01-01T00:00:00Z", title="one"), _conv("x", "2024-02-01T00:00:00Z", title="two")],
        [],
    )
    assert [c.title for c in result] == ["two"]


def test_merge_with_report_counts_outcomes() -> None:
    """the report lists new, replaced and kept incoming ids."""
    existing = [_conv("keep", "2024-06-01T00:00:00Z"), _conv("swap", "2024-01-01T00:00:00Z")]
    incoming = [
        _conv("keep", "2024-01-01T00:00:00Z"),
        _conv("swap", "2024-06-01T00:00:00Z"),
        _conv("fresh", "2024-02-01T00:00:00Z"),
    ]

    report = merge_with_report(existing, incoming)

    assert report.added == ["fresh"]
    assert report.replaced == ["swap"]
    assert report.kept == ["keep"]
    assert len(report.conversations) == 3


def test_merge_does_not_mutate_inputs() -> None:
    """the inputs are left as they were."""
    existing = [_conv("x", "2024-01-01T00:00:00Z")]
    incoming = [_conv("x", "2024-06-01T00:00:00Z")]
    merge_conversations(existing, incoming)
    assert len(existing) == 1 and existing[0].updated_at == "2024-01-01T00:00:00Z"
