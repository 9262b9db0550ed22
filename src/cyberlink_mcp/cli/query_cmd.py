"""Ledger commands: query last-id, query by-id, tx status, wallet balance."""

from __future__ import annotations

import click

from ._common import CONFIG_HOME, run_with_facade


def register_query_commands(main: click.Group) -> None:
    """Register the query, tx and wallet command groups."""

    @main.group()
    def query():
        """Read cyberlinks from the contract."""

    @query.command("last-id")
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def query_last_id(home: str):
        """Show the last assigned cyberlink ID."""
        run_with_facade(home, lambda facade: facade.query.query_last_id())

    @query.command("by-id")
    @click.argument("gid", type=int)
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def query_by_id(gid: int, home: str):
        """Show one cyberlink by its numeric ID."""
        run_with_facade(home, lambda facade: facade.query.query_by_id(gid))

    @main.group()
    def tx():
        """Inspect transactions."""

    @tx.command("status")
    @click.argument("tx_hash")
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def tx_status(tx_hash: str, home: str):
        """Show whether a transaction is pending, confirmed or failed."""
        run_with_facade(home, lambda facade: facade.query.tx_status(tx_hash))

    @main.group()
    def wallet():
        """Inspect the signing wallet."""

    @wallet.command("balance")
    @click.option("--home", default=CONFIG_HOME, type=click.Path(), help="Config directory.")
    def wallet_balance(home: str):
        """Show the wallet address and balance."""

        async def _balance(facade):
            if facade.tx is None:
                raise click.ClickException("WALLET_MNEMONIC is not configured")
            return await facade.tx.query_wallet_balance()

        run_with_facade(home, _balance)
