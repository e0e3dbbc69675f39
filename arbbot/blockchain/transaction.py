"""
Transaction building from Jupiter swap instructions.

Each instruction returned by the swap-instructions endpoint is copied into a
solders Instruction as-is; the builder never inspects or alters its content.
"""

import base64
from typing import TYPE_CHECKING, Any, Dict, List

from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from arbbot.config.logging_config import get_logger
from arbbot.errors import TransactionBuildError

if TYPE_CHECKING:
    from arbbot.trading.jupiter import Quote

logger = get_logger(__name__)


def instruction_from_api(payload: Dict[str, Any]) -> Instruction:
    """
    Convert a Jupiter instruction payload into a solders Instruction.

    Payload shape::

        {
            "programId": "<base58>",
            "accounts": [{"pubkey": "<base58>", "isSigner": bool, "isWritable": bool}],
            "data": "<base64>"
        }

    Raises:
        TransactionBuildError: If the payload is malformed
    """
    try:
        accounts = [
            AccountMeta(
                pubkey=Pubkey.from_string(account["pubkey"]),
                is_signer=bool(account["isSigner"]),
                is_writable=bool(account["isWritable"]),
            )
            for account in payload["accounts"]
        ]
        return Instruction(
            program_id=Pubkey.from_string(payload["programId"]),
            data=base64.b64decode(payload["data"], validate=True),
            accounts=accounts,
        )
    except Exception as e:
        raise TransactionBuildError(f"Malformed instruction: {e}")


def build_instructions(quote: "Quote") -> List[Instruction]:
    """Wrap every quote instruction, preserving order."""
    return [instruction_from_api(payload) for payload in quote.instructions]


def build_transaction(quote: "Quote", payer: Pubkey) -> Transaction:
    """
    Assemble an unsigned transaction from the quote's instructions.

    The recent blockhash and signature are filled in at submission time.

    Args:
        quote: Quote carrying the swap instructions
        payer: Fee payer (the bot wallet)

    Returns:
        Unsigned legacy Transaction

    Raises:
        TransactionBuildError: If any instruction is malformed
    """
    if not quote.instructions:
        raise TransactionBuildError("Quote has no instructions")

    instructions = build_instructions(quote)

    try:
        message = Message(instructions, payer)
    except Exception as e:
        raise TransactionBuildError(f"Cannot compile message: {e}")

    logger.debug(
        "transaction_built",
        instruction_count=len(instructions),
        payer=str(payer),
    )

    return Transaction.new_unsigned(message)
