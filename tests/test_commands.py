import asyncio
import json
import unittest

from retro_board.protocol import commands
from retro_board.protocol.commands import Commands, OutboundFrame


class TestBuilders(unittest.TestCase):

    def test_add(self):
        self.assertEqual(
            commands.add("c1", "hello"),
            OutboundFrame(op="add", data={"columnId": "c1", "cardText": "hello"}),
        )

    def test_create_retro(self):
        self.assertEqual(
            commands.create_retro("sprint1", ["a", "b"]),
            OutboundFrame(op="createRetro", data={"name": "sprint1", "users": ["a", "b"]}),
        )

    def test_create_retro_accepts_any_iterable(self):
        frame = commands.create_retro("sprint1", (u for u in ["a", "b"]))
        self.assertEqual(frame.data["users"], ["a", "b"])

    def test_edit_payload(self):
        frame = commands.edit("t1", "c1", "k1", "better words")
        self.assertEqual(frame.op, "edit")
        self.assertEqual(
            frame.data,
            {"columnId": "c1", "contentId": "t1", "cardId": "k1", "cardText": "better words"},
        )

    def test_menu_is_empty_string(self):
        frame = commands.menu()
        self.assertEqual(frame, OutboundFrame(op="menu", data=""))
        self.assertEqual(json.loads(frame.to_json()), {"op": "menu", "data": '""'})

    def test_join_retro(self):
        self.assertEqual(commands.join_retro("r1"), OutboundFrame(op="joinRetro", data={"retroId": "r1"}))

    def test_card_actions(self):
        cases = [
            (commands.move("c1", "c2", "k1"), "move", {"columnFrom": "c1", "columnTo": "c2", "cardId": "k1"}),
            (commands.stage("voting"), "stage", {"stage": "voting"}),
            (commands.reveal("c1", "k1"), "reveal", {"columnId": "c1", "cardId": "k1"}),
            (
                commands.group("c1", "k1", "c2", "k2"),
                "group",
                {"columnFrom": "c1", "cardFrom": "k1", "columnTo": "c2", "cardTo": "k2"},
            ),
            (commands.vote("c1", "k1"), "vote", {"columnId": "c1", "cardId": "k1"}),
            (commands.unvote("c1", "k1"), "unvote", {"columnId": "c1", "cardId": "k1"}),
            (commands.delete("c1", "k1"), "delete", {"columnId": "c1", "cardId": "k1"}),
        ]
        for frame, op, data in cases:
            with self.subTest(op=op):
                self.assertEqual(frame, OutboundFrame(op=op, data=data))

    def test_no_client_side_validation(self):
        self.assertEqual(commands.add("", "").data, {"columnId": "", "cardText": ""})

    def test_to_json_wraps_payload(self):
        frame = json.loads(commands.add("c1", "hi").to_json(connection_id="conn-1", token="secret"))
        self.assertEqual(frame["id"], "conn-1")
        self.assertEqual(frame["token"], "secret")
        self.assertEqual(json.loads(frame["data"]), {"columnId": "c1", "cardText": "hi"})


class TestBoundCommands(unittest.TestCase):

    def test_methods_hand_op_and_data_to_sender(self):
        sent = []

        async def send(op, data):
            sent.append((op, data))

        async def scenario():
            cmds = Commands(send)
            await cmds.add("c1", "hello")
            await cmds.vote("c1", "k1")
            await cmds.menu()
            await cmds.create_retro("sprint1", ["a"])

        asyncio.run(scenario())
        self.assertEqual(
            sent,
            [
                ("add", {"columnId": "c1", "cardText": "hello"}),
                ("vote", {"columnId": "c1", "cardId": "k1"}),
                ("menu", ""),
                ("createRetro", {"name": "sprint1", "users": ["a"]}),
            ],
        )


if __name__ == "__main__":
    unittest.main()
