import json
import unittest

from retro_board.protocol.envelope import EnvelopeError, decode_envelope, encode_envelope
from retro_board.protocol.payloads import AddCard


class TestDecodeEnvelope(unittest.TestCase):

    def test_extracts_id_op_and_raw_data(self):
        env = decode_envelope('{"id": "conn-1", "op": "stage", "data": "{\\"stage\\": \\"voting\\"}"}')
        self.assertEqual(env.connection_id, "conn-1")
        self.assertEqual(env.op, "stage")
        # data stays a string, payload decoding is the dispatcher's job
        self.assertEqual(env.data, '{"stage": "voting"}')

    def test_accepts_bytes(self):
        env = decode_envelope(b'{"id": "c", "op": "menu", "data": "\\"\\""}')
        self.assertEqual(env.data, '""')

    def test_outer_parse_failures_raise(self):
        bad_frames = [
            "not json",
            "[]",
            '{"op": "card", "data": "{}"}',
            '{"id": "c", "op": "card", "data": {"cardId": "k1"}}',
            '{"id": 7, "op": "card", "data": "{}"}',
        ]
        for raw in bad_frames:
            with self.subTest(raw=raw):
                with self.assertRaises(EnvelopeError) as ctx:
                    decode_envelope(raw)
                self.assertTrue(str(ctx.exception))
                self.assertEqual(ctx.exception.raw, raw)


class TestEncodeEnvelope(unittest.TestCase):

    def test_data_is_second_layer_json(self):
        frame = json.loads(encode_envelope("add", AddCard(column_id="c1", card_text="hello")))
        self.assertEqual(frame, {"op": "add", "data": '{"columnId": "c1", "cardText": "hello"}'})

    def test_delivery_metadata(self):
        frame = json.loads(encode_envelope("menu", "", connection_id="conn-9", token="tok"))
        self.assertEqual(frame, {"id": "conn-9", "op": "menu", "data": '""', "token": "tok"})

    def test_encoded_frame_decodes(self):
        raw = encode_envelope("user", {"username": "zoë"}, connection_id="conn-1")
        env = decode_envelope(raw)
        self.assertEqual(env.op, "user")
        self.assertEqual(json.loads(env.data), {"username": "zoë"})


if __name__ == "__main__":
    unittest.main()
