"""
Reminder Bot

Wires the reminder engine to GitHub issue comments. A webhook receiver
(not part of this package) passes issue_comment.created payloads to
ReminderBot.handle_issue_comment().

Running this module starts the engine, re-arms stored reminders and keeps
the process alive so they fire.
"""

import asyncio
import logging
from typing import Optional

import asyncpg
from dotenv import load_dotenv

import analytics
from commands.reminder_commands import ReminderCommands
from config import BotConfig
from github_client import GitHubClient, GitHubCommentReply
from reminders import (
    CommentContext,
    DateparserExtractor,
    DeliveryDispatcher,
    GroupResolver,
    ReminderScheduler,
    ReminderStore,
    classify_comment,
)

load_dotenv()

logger = logging.getLogger("reminderbot")

GENERIC_FAILURE = "We had trouble processing your request. Please try again later."


class ReminderBot:
    """Reminder engine bound to one database and one GitHub token."""

    def __init__(
        self,
        config: BotConfig,
        store: Optional[ReminderStore] = None,
        github: Optional[GitHubClient] = None,
    ):
        self.config = config
        self.db_pool: Optional[asyncpg.Pool] = None
        self.store = store
        self.github = github
        self.scheduler: Optional[ReminderScheduler] = None
        self.commands: Optional[ReminderCommands] = None

    def reply_for(self, context: CommentContext) -> GitHubCommentReply:
        return GitHubCommentReply(self.github, context)

    async def start(self) -> None:
        """Connect to the database, build the engine and recover reminders."""
        if self.store is None:
            if not self.config.database_url:
                raise RuntimeError("DATABASE_URL is not set")
            self.db_pool = await asyncpg.create_pool(self.config.database_url)
            self.store = ReminderStore(self.db_pool)
            await self.store.ensure_schema()

            analytics.configure(self.db_pool, enabled=self.config.analytics_enabled)
            await analytics.ensure_schema()

        if self.github is None:
            self.github = GitHubClient(
                token=self.config.github_token, base_url=self.config.github_api_url
            )

        groups = GroupResolver(self.store)
        dispatcher = DeliveryDispatcher(self.store, groups, self.reply_for)
        self.scheduler = ReminderScheduler(self.store, dispatcher)
        self.commands = ReminderCommands(
            self.store,
            self.scheduler,
            groups,
            extractor=DateparserExtractor(self.config.timezone),
        )

        logger.info(f"Setup: DATABASE_URL={'set' if self.config.database_url else 'missing'}")
        logger.info(f"Setup: GITHUB_TOKEN={'set' if self.config.github_token else 'missing'}")
        logger.info(f"Setup: REMINDER_TIMEZONE={self.config.timezone}")

        if self.config.recovery_enabled:
            await self.scheduler.recover()
        else:
            logger.warning("Reminder recovery disabled, stored reminders will not fire until re-armed")

    def _is_own_comment(self, payload: dict) -> bool:
        login = payload.get("comment", {}).get("user", {}).get("login", "")
        if login.endswith("[bot]"):
            return True
        return bool(self.config.bot_username) and login == self.config.bot_username

    async def handle_issue_comment(self, payload: dict) -> bool:
        """
        Handle an issue_comment.created payload.

        Returns:
            True if the comment was a reminder command, False otherwise
        """
        if self._is_own_comment(payload):
            return False

        command = classify_comment(
            payload.get("comment", {}).get("body"), self.config.command_word
        )
        if command is None:
            return False

        context = CommentContext.from_payload(payload)
        reply = self.reply_for(context)
        try:
            await self.commands.handle(command, context, reply)
        except Exception:
            logger.error(
                f"Failed to process {command.action.value} command on "
                f"{context.repository}#{context.issue_number}",
                exc_info=True,
            )
            reply.reply(GENERIC_FAILURE)
            try:
                await reply.send()
            except Exception as e:
                # keep the original fault as the one that propagates
                logger.error(f"Could not post failure reply: {e}", exc_info=True)
            raise

        await reply.send()
        return True

    async def close(self) -> None:
        """Clean up resources on shutdown."""
        if self.scheduler:
            await self.scheduler.shutdown()
        if self.github:
            await self.github.close()
        if self.db_pool:
            await self.db_pool.close()


async def main():
    """Run the reminder engine until interrupted."""
    config = BotConfig.from_env()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not config.database_url:
        print("Error: DATABASE_URL environment variable not set")
        print("Please set it in your .env file")
        return

    bot = ReminderBot(config)
    await bot.start()
    try:
        await asyncio.Event().wait()
    finally:
        await bot.close()


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
