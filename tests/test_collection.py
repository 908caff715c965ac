from __future__ import annotations

import hashlib
import json

import pytest

from sigmf_toolkit import (
    SIGMF_VERSION,
    Collection,
    ExtensionDeclaration,
    InvalidFieldKey,
    MissingCollection,
    MissingRequiredField,
    Recording,
    RecordingRef,
)


def test_new_collection_is_valid() -> None:
    collection = Collection(description="Array capture", author="ops")

    assert collection.collection == {
        "core:version": SIGMF_VERSION,
        "core:description": "Array capture",
        "core:author": "ops",
    }
    assert collection.validate().valid
    assert collection.streams == []


def test_add_recording_hashes_metadata_text() -> None:
    collection = Collection()
    text = Recording("cf32_le").to_json()

    ref = collection.add_recording("channel-0", text)

    assert ref == {"name": "channel-0", "hash": hashlib.sha512(text.encode("utf-8")).hexdigest()}
    assert collection.find_recording("channel-0") == ref
    assert collection.validate().valid


def test_add_recording_accepts_recording_objects() -> None:
    recording = Recording("ci16_le")
    collection = Collection()

    ref = collection.add_recording("r", recording)

    assert ref["hash"] == hashlib.sha512(recording.to_json().encode("utf-8")).hexdigest()


def test_recording_ref_model_keeps_extra_fields() -> None:
    collection = Collection()
    collection.add_recording_ref(RecordingRef(name="a", hash="F" * 128, **{"antenna:hagl": 12.0}))

    assert collection.streams[0] == {"name": "a", "hash": "f" * 128, "antenna:hagl": 12.0}


def test_remove_recording() -> None:
    collection = Collection()
    collection.add_recording_ref({"name": "a", "hash": "0" * 128})
    collection.add_recording_ref({"name": "b", "hash": "1" * 128})

    assert collection.remove_recording("a") is True
    assert collection.remove_recording("a") is False
    assert [ref["name"] for ref in collection.streams] == ["b"]
    assert collection.find_recording("a") is None
    assert Collection().remove_recording("a") is False


def test_from_json_errors() -> None:
    with pytest.raises(MissingCollection):
        Collection.from_json("{}")
    with pytest.raises(MissingRequiredField) as excinfo:
        Collection.from_json({"collection": {"core:description": "x"}})
    assert excinfo.value.field == "core:version"


def test_json_round_trip() -> None:
    collection = Collection(extensions=[ExtensionDeclaration(name="antenna", version="1.0.0")])
    collection.add_recording_ref({"name": "a", "hash": "a" * 128})
    collection.set_extension_field("antenna:hagl", 3.0)

    restored = Collection.from_json(collection.to_json(pretty=False))

    assert restored.to_metadata() == collection.to_metadata()
    assert restored.get_extension_field("antenna:hagl") == 3.0
    assert json.loads(collection.to_json())["collection"]["core:extensions"][0]["optional"] is True


def test_snapshot_is_deep_copy() -> None:
    collection = Collection()
    collection.add_recording_ref({"name": "a", "hash": "a" * 128})
    snapshot = collection.to_metadata()

    collection.streams[0]["name"] = "changed"

    assert snapshot["collection"]["core:streams"][0]["name"] == "a"


def test_extension_key_requires_namespace() -> None:
    with pytest.raises(InvalidFieldKey):
        Collection().set_extension_field("hagl", 3.0)


def test_validation_rules() -> None:
    collection = Collection.from_json(
        {
            "collection": {
                "core:version": "one",
                "core:streams": [
                    "nope",
                    {"name": "", "hash": "a" * 127},
                    {"name": "ok", "hash": "z" * 128},
                    {"name": "fine"},
                ],
                "core:extensions": [{"name": "antenna", "version": "1.0.0", "optional": "yes"}, 4],
            }
        }
    )

    result = collection.validate()

    assert [(issue.path, issue.message) for issue in result.errors] == [
        ("collection.core:version", "must match pattern X.Y.Z"),
        ("collection.core:streams[0]", "must be an object"),
        ("collection.core:streams[1].name", "is required and must be a string"),
        ("collection.core:streams[1].hash", "must be 128 hex characters"),
        ("collection.core:streams[2].hash", "must contain only hex characters"),
        ("collection.core:streams[3].hash", "is required and must be a string"),
        ("collection.core:extensions[0].optional", "must be a boolean"),
        ("collection.core:extensions[1]", "must be an object"),
    ]


def test_streams_must_be_an_array() -> None:
    collection = Collection.from_json({"collection": {"core:version": "1.2.0", "core:streams": {}}})
    assert [issue.message for issue in collection.validate().errors] == ["must be an array"]
