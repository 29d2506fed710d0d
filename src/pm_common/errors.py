"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Token ledger / accounts
  3xxx: Market lifecycle
  4xxx: Trade
  9xxx: System

Every error is terminal for the operation that raised it. Services roll back
and re-raise; nothing in the engine retries.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


# --- 2xxx: Token ledger ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, owner: str, mint: str) -> None:
        super().__init__(2002, f"Token account not found: owner={owner} mint={mint}", 404)


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class InvalidDeadlineError(AppError):
    def __init__(self, deadline: int, now: int) -> None:
        super().__init__(
            3002, f"Invalid deadline {deadline}: must be later than {now}", 422
        )


class InvalidProjectNameError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid project name: {detail}", 422)


class MarketAlreadyExistsError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3004, f"Market already exists: {market_id}", 409)


class MarketSettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3005, f"Market has already been settled: {market_id}", 422)


class DeadlinePassedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3006, f"Market deadline has passed: {market_id}", 422)


class DeadlineNotPassedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3007, f"Market deadline has not passed yet: {market_id}", 422)


class AlreadySettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3008, f"Market already settled: {market_id}", 409)


class MarketNotSettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3009, f"Market has not been settled yet: {market_id}", 422)


class UnauthorizedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(
            3010, f"Only the market authority can perform this action: {market_id}", 403
        )


# --- 4xxx: Trade ---

class ZeroAmountError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Amount must be greater than zero", 422)


class NoLiquidityError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4002, f"No liquidity in the pool: {detail}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ArithmeticOverflowError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9003, f"Arithmetic overflow: {detail}", 422)


class CorruptedStateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9004, f"Corrupted state: {detail}", 500)


class CustodyMismatchError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9005, f"Custody balance mismatch: {detail}", 500)
