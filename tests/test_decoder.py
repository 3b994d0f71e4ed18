from __future__ import annotations

import pytest


def test_decode_plain_json_object():
    from travel_receipts.modules.extraction.decoder import decode_model_output

    assert decode_model_output('{"type": "hotel", "hotelName": "Ritz"}') == {
        "type": "hotel",
        "hotelName": "Ritz",
    }


def test_decode_fenced_object_surrounded_by_prose():
    from travel_receipts.modules.extraction.decoder import decode_model_output

    raw = 'Here is the result:\n```json\n{"type":"hotel","hotelName":"Ritz"}\n```\nThanks!'
    assert decode_model_output(raw) == {"type": "hotel", "hotelName": "Ritz"}


def test_decode_ignores_reasoning_block():
    from travel_receipts.modules.extraction.decoder import decode_model_output

    raw = '<think>maybe {"type": "hotel"}?</think>\n{"type": "flight"}'
    assert decode_model_output(raw) == {"type": "flight"}


def test_braces_inside_strings_do_not_end_the_object():
    from travel_receipts.modules.extraction.decoder import decode_model_output

    raw = 'Result: {"type": "hotel", "hotelName": "The {Brace} \\"Inn}\\"", "x": {"y": 1}} done'
    assert decode_model_output(raw) == {
        "type": "hotel",
        "hotelName": 'The {Brace} "Inn}"',
        "x": {"y": 1},
    }


def test_find_json_object_unbalanced_returns_none():
    from travel_receipts.modules.extraction.decoder import find_json_object

    assert find_json_object('{"a": {"b": 1}') is None
    assert find_json_object("no braces here") is None


def test_decode_without_object_raises():
    from travel_receipts.core.errors import DecodeError
    from travel_receipts.modules.extraction.decoder import decode_model_output

    with pytest.raises(DecodeError, match="no object found"):
        decode_model_output("I could not find anything useful.")


def test_decode_broken_object_raises():
    from travel_receipts.core.errors import DecodeError
    from travel_receipts.modules.extraction.decoder import decode_model_output

    with pytest.raises(DecodeError, match="parse failed"):
        decode_model_output("answer: {type: flight}")


def test_decode_top_level_array_is_not_a_record():
    from travel_receipts.core.errors import DecodeError
    from travel_receipts.modules.extraction.decoder import decode_model_output

    # the array itself parses, but only the inner object is recoverable
    assert decode_model_output('[{"type": "hotel"}]') == {"type": "hotel"}
    with pytest.raises(DecodeError):
        decode_model_output("[1, 2, 3]")
