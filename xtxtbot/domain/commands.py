"""Command dispatch — turns one chat message into one reply.

Pure Python, no framework dependencies. The twtxt client is reached only
through the TwtxtPort handed in by the launcher.
"""

import sys
from typing import Awaitable, Callable, Dict

from xtxtbot.config import SOURCE_URL, BotConfig
from xtxtbot.domain.models import CommandInvocation
from xtxtbot.ports.inbound import IncomingMessage
from xtxtbot.ports.outbound import ToolResult, TwtxtPort

# Reply texts users see; keep the wording stable
NOT_ALLOWED = "You're not allowed to control me."
PONG = "Pong!"
NO_INPUT = "No Input."
MISSING_INPUT = "Missing Input."
TOO_MANY_ARGUMENTS = "Too many arguments."
WRONG_PARAMETER_COUNT = "Wrong parameter count."
SINGLE_USER_ONLY = "Timeline view supports only one user."
NO_MENTIONS = "No mentions found."
FAILED = "Failed."
UNKNOWN_COMMAND = 'Unknown command. Send "help".'

# Allowance for "tw " in front of the tweet text
TWEET_PREFIX_LENGTH = 3


def _log(msg: str):
    print(msg, file=sys.stderr)


def tokenize(body: str) -> CommandInvocation:
    """Split a message body on whitespace. No quoting is supported.

    An empty body yields an empty keyword, which routes to the unknown
    command reply.
    """
    words = body.split()
    if not words:
        return CommandInvocation(keyword="", args=[], raw=body)
    return CommandInvocation(keyword=words[0].lower(), args=words[1:], raw=body)


def build_help_text(config: BotConfig) -> str:
    entries = config.timeline_entries
    return (
        '"help": Show this message.\n'
        '"ping": Bot replies if available.\n'
        f'"tl": Show last {entries} timeline entries.\n'
        '"tv [user]": Show [user]s timeline.\n'
        '"tw [tweet]": Will tweet your input [tweet] and afterwards show your timeline.\n'
        f'"tm [user]": Will show the last {entries} mentions. '
        f'[user] will fall back to "{config.twtxt_nick}" if not specified.\n'
        f'"tt [tag]": Will show the last {entries} occurrences of #[tag]\n'
        '"tf [user] [url]": Follow [user].\n'
        '"tu [user]": Unfollow [user].\n'
        '"to": List the accounts you are following.\n'
        '"source": Shows a link to the sourcecode.'
    )


class CommandDispatcher:
    """Routes chat commands to the twtxt client and formats replies.

    Every call to handle() produces exactly one reply body. Tool failures
    are reported as "Failed." and never retried.
    """

    def __init__(self, config: BotConfig, twtxt: TwtxtPort):
        self.config = config
        self.twtxt = twtxt
        self._handlers: Dict[str, Callable[[CommandInvocation], Awaitable[str]]] = {
            "help": self._help,
            "ping": self._ping,
            "source": self._source,
            "tw": self._tweet,
            "tl": self._timeline,
            "tv": self._view_user,
            "tm": self._mentions,
            "tt": self._tags,
            "tf": self._follow,
            "tu": self._unfollow,
            "to": self._following,
        }

    def is_authorized(self, sender: str) -> bool:
        """Prefix match, so every resource of the controller account passes."""
        return sender.startswith(self.config.control_jid)

    async def handle(self, message: IncomingMessage) -> str:
        if not self.is_authorized(message.sender):
            _log(f"[dispatch] rejected: Body = {message.body} - from = {message.sender}")
            return NOT_ALLOWED

        invocation = tokenize(message.body)
        handler = self._handlers.get(invocation.keyword)
        if handler is None:
            return UNKNOWN_COMMAND

        _log(f"[dispatch] {invocation.keyword} ({len(invocation.args)} arg(s)) from {message.sender}")
        try:
            return await handler(invocation)
        except Exception as e:
            _log(f"[dispatch] {invocation.keyword} crashed: {e}")
            return FAILED

    # -- Static replies --

    async def _help(self, cmd: CommandInvocation) -> str:
        return build_help_text(self.config)

    async def _ping(self, cmd: CommandInvocation) -> str:
        return PONG

    async def _source(self, cmd: CommandInvocation) -> str:
        return SOURCE_URL

    # -- twtxt commands --

    @staticmethod
    def _reply(result: ToolResult) -> str:
        if not result.ok:
            _log(f"[dispatch] tool failed: {result.error}")
            return FAILED
        return result.output

    async def _tweet(self, cmd: CommandInvocation) -> str:
        if not cmd.args:
            return NO_INPUT

        # Measured on the raw body, not on the re-joined tokens.
        # Counts code points, so non-ASCII tweets are not charged per UTF-8 byte.
        length = len(cmd.raw) - TWEET_PREFIX_LENGTH
        limit = self.config.max_characters
        if length > limit:
            return (
                f"Tweet exceeds maximum of {limit} characters "
                f"by {length - limit} characters."
            )

        result = await self.twtxt.tweet(" ".join(cmd.args))
        if not result.ok:
            _log(f"[dispatch] tweet failed: {result.error}")
            return FAILED
        # A successful tweet answers with the refreshed timeline
        return await self._timeline(cmd)

    async def _timeline(self, cmd: CommandInvocation) -> str:
        return self._reply(await self.twtxt.timeline(self.config.timeline_entries))

    async def _view_user(self, cmd: CommandInvocation) -> str:
        if not cmd.args:
            return NO_INPUT
        if len(cmd.args) > 1:
            return SINGLE_USER_ONLY
        return self._reply(
            await self.twtxt.view_user(cmd.args[0], self.config.timeline_entries)
        )

    async def _mentions(self, cmd: CommandInvocation) -> str:
        if len(cmd.args) > 1:
            return TOO_MANY_ARGUMENTS
        nick = cmd.args[0] if cmd.args else self.config.twtxt_nick
        result = await self.twtxt.mentions(nick, self.config.timeline_entries)
        if result.no_match:
            return NO_MENTIONS
        return self._reply(result)

    async def _tags(self, cmd: CommandInvocation) -> str:
        if not cmd.args:
            return MISSING_INPUT
        if len(cmd.args) > 1:
            return TOO_MANY_ARGUMENTS
        return self._reply(
            await self.twtxt.tags(cmd.args[0], self.config.timeline_entries)
        )

    async def _follow(self, cmd: CommandInvocation) -> str:
        if len(cmd.args) != 2:
            return MISSING_INPUT
        user, url = cmd.args
        return self._reply(await self.twtxt.follow(user, url))

    async def _unfollow(self, cmd: CommandInvocation) -> str:
        if len(cmd.args) != 1:
            return WRONG_PARAMETER_COUNT
        return self._reply(await self.twtxt.unfollow(cmd.args[0]))

    async def _following(self, cmd: CommandInvocation) -> str:
        return self._reply(await self.twtxt.following())
