# slashAI - Discord Bot and MCP Server
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
GitHub Comment Client

Posts issue comments through the GitHub REST API, and batches reply
fragments for one interaction into a single comment.
"""

import logging
import os
from typing import Optional

import httpx

from reminders.manager import CommentContext

logger = logging.getLogger("reminderbot.github")

GITHUB_API_BASE = "https://api.github.com"


class GitHubClient:
    """Minimal GitHub REST client for issue comments."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token or os.getenv("GITHUB_TOKEN")

        if not self.token:
            logger.warning("GITHUB_TOKEN not set - posting comments will fail authentication")

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=30.0,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client"""
        await self._client.aclose()

    async def create_issue_comment(self, repository: str, issue_number: int, body: str) -> dict:
        """
        Post a comment on an issue or pull request.

        Args:
            repository: "owner/name"
            issue_number: Issue or pull request number
            body: Markdown comment body

        Returns:
            The created comment as returned by the API

        Raises:
            httpx.HTTPError: If the request fails
        """
        response = await self._client.post(
            f"/repos/{repository}/issues/{issue_number}/comments",
            json={"body": body},
        )
        response.raise_for_status()
        return response.json()


class GitHubCommentReply:
    """
    Reply channel for one comment thread.

    Fragments queued with reply() are posted together by send(). After
    send(final=True) the channel is closed and further calls are ignored.
    """

    def __init__(self, client: GitHubClient, context: CommentContext):
        self.client = client
        self.context = context
        self._fragments: list[str] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def reply(self, text: str) -> None:
        """Queue a fragment for the next send()."""
        if self._closed:
            logger.warning(f"Reply on {self.context.repository}#{self.context.issue_number} already closed, dropping fragment")
            return
        self._fragments.append(text)

    async def send(self, final: bool = False) -> None:
        """Post the queued fragments as one comment."""
        if self._closed:
            logger.debug("send() on a closed reply channel ignored")
            return

        fragments, self._fragments = self._fragments, []
        if final:
            self._closed = True

        if not fragments:
            return

        body = "\n\n".join(fragments)
        try:
            await self.client.create_issue_comment(
                self.context.repository, self.context.issue_number, body
            )
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Failed to post comment on {self.context.repository}#{self.context.issue_number} "
                f"(HTTP {e.response.status_code}): {e.response.text[:200]}"
            )
            raise
        except httpx.HTTPError as e:
            logger.error(f"Failed to post comment on {self.context.repository}#{self.context.issue_number}: {e}")
            raise
