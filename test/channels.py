"""
Tests for the in-memory message transport.

This module verifies that:
- Replies are handed to the oldest waiter whose check accepts them.
- Unclaimed user messages are kept in order for later waiters; bot messages are not.
- Waiting honors the timeout and never leaks waiters.
"""
import asyncio
import io
import unittest
from unittest import IsolatedAsyncioTestCase

from rich.console import Console

from parley import Author, QueueChannel


class QueueChannelTest(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.channel = QueueChannel("general")
        self.author = Author(1, "user")

    def testIdentity(self) -> None:
        self.assertEqual(self.channel.id, "general")
        self.assertNotEqual(QueueChannel().id, QueueChannel().id)

    async def testSendRecordsBotMessage(self) -> None:
        message = await self.channel.send("hello")
        self.assertEqual(message.author, self.channel.bot)
        self.assertIs(message.channel, self.channel)
        self.assertEqual(self.channel.sent, [message])
        self.assertEqual(self.channel.history, [message])

    async def testBacklogInOrder(self) -> None:
        first = self.channel.feed(self.author, "one")
        second = self.channel.feed(self.author, "two")
        self.assertIs(await self.channel.await_reply(lambda message: True), first)
        self.assertIs(await self.channel.await_reply(lambda message: True), second)

    async def testCheckFiltersBacklog(self) -> None:
        self.channel.feed(Author(2), "other")
        mine = self.channel.feed(self.author, "mine")
        reply = await self.channel.await_reply(lambda message: message.author == self.author)
        self.assertIs(reply, mine)

    async def testBotMessagesAreNotReplies(self) -> None:
        await self.channel.send("prompt")
        with self.assertRaises(TimeoutError):
            await self.channel.await_reply(lambda message: True, time=0.01)

    async def testWaiterReceivesLaterMessage(self) -> None:
        task = asyncio.create_task(self.channel.await_reply(lambda message: message.content == "yes", time=1))
        await asyncio.sleep(0)
        self.channel.feed(self.author, "no")
        expected = self.channel.feed(self.author, "yes")
        self.assertIs(await task, expected)
        self.assertEqual([message.content for message in self.channel._backlog], ["no"])

    async def testTimeoutRemovesWaiter(self) -> None:
        with self.assertRaises(TimeoutError):
            await self.channel.await_reply(lambda message: True, time=0.01)
        self.assertEqual(len(self.channel._waiters), 0)
        self.channel.feed(self.author, "late")
        self.assertEqual(len(self.channel._backlog), 1)

    async def testCancelledWaiterRequeuesDeliveredMessage(self) -> None:
        task = asyncio.create_task(self.channel.await_reply(lambda message: True))
        await asyncio.sleep(0)
        delivered = self.channel.feed(self.author, "answer")
        task.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await task
        self.assertEqual(len(self.channel._waiters), 0)
        self.assertEqual(list(self.channel._backlog), [delivered])
        self.assertIs(await self.channel.await_reply(lambda message: True), delivered)

    async def testConsoleEcho(self) -> None:
        console = Console(file=io.StringIO(), color_system=None)
        channel = QueueChannel(console=console)
        channel.feed(self.author, "hi there")
        self.assertIn("user: hi there", console.file.getvalue())

    def testConsoleMustBeRich(self) -> None:
        with self.assertRaises(TypeError):
            QueueChannel(console=print)


if __name__ == "__main__":
    unittest.main()
