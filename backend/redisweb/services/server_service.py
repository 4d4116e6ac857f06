"""
Server Service Module

Server-level operations: configured servers, INFO, database count and raw commands.
"""

import logging
import shlex

from redisweb.common.errors import StoreCommandError, ValidationError
from redisweb.common.reply import render_reply
from redisweb.config import RedisServer
from redisweb.domain.keys import CommandRequest, CommandResult
from redisweb.repositories.key_store_repo import RepositoryFactory

logger = logging.getLogger(__name__)


class ServerService:
    """Server Service"""

    def __init__(self, repo_factory: RepositoryFactory, servers: list[RedisServer]):
        self.repo_factory = repo_factory
        self.servers = servers

    def list_servers(self) -> list[str]:
        return [server.name for server in self.servers]

    async def info(self, server: str, database: int = 0) -> str:
        return await self.repo_factory(server, database).info()

    async def database_count(self, server: str) -> int:
        return await self.repo_factory(server, 0).database_count()

    async def run_command(self, data: CommandRequest) -> CommandResult:
        """
        Execute a raw command

        The reply (or the store's error text) is passed back verbatim,
        rendered like redis-cli.

        Raises:
            ValidationError: Empty command or unbalanced quotes
            StoreUnavailableError: Store cannot be reached
        """
        try:
            args = shlex.split(data.command)
        except ValueError as e:
            raise ValidationError(
                message=f"Cannot parse command: {e}",
                code="invalid_command",
            )
        if not args:
            raise ValidationError(message="Command must not be empty", code="empty_command")

        logger.info("Running %s on %s/%d", args[0].upper(), data.server, data.database)
        repo = self.repo_factory(data.server, data.database)
        try:
            reply = await repo.run_command(*args)
        except StoreCommandError as e:
            result = f"(error) {e.message}"
        else:
            result = render_reply(reply)
        return CommandResult(command=data.command, result=result)
