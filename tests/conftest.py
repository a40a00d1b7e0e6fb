import pytest
from google.protobuf import descriptor_pb2
from google.protobuf import descriptor_pool
from google.protobuf import message_factory


def _build_note_event_message_cls():
    # NoteEvent { int32 id = 1; string event_type = 2; string text = 3; }
    file_proto = descriptor_pb2.FileDescriptorProto()
    file_proto.name = "fixtures/note_event.proto"
    file_proto.package = "fixtures"
    file_proto.syntax = "proto3"

    message_proto = file_proto.message_type.add()
    message_proto.name = "NoteEvent"

    for number, (name, field_type) in enumerate(
        [
            ("id", descriptor_pb2.FieldDescriptorProto.TYPE_INT32),
            ("event_type", descriptor_pb2.FieldDescriptorProto.TYPE_STRING),
            ("text", descriptor_pb2.FieldDescriptorProto.TYPE_STRING),
        ],
        start=1,
    ):
        field = message_proto.field.add()
        field.name = name
        field.number = number
        field.label = descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL
        field.type = field_type

    # A private pool keeps the test message out of the process-wide default pool.
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(file_proto.SerializeToString())
    return message_factory.GetMessageClass(pool.FindMessageTypeByName("fixtures.NoteEvent"))


@pytest.fixture(scope="session")
def note_event_cls():
    return _build_note_event_message_cls()


@pytest.fixture(autouse=True)
def fresh_default_codec(monkeypatch):
    import jsonfixtures

    monkeypatch.delenv("JSONFIXTURES_LENIENT_MAPS", raising=False)
    jsonfixtures.default_codec.cache_clear()
    yield
    jsonfixtures.default_codec.cache_clear()
