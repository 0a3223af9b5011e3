from dataclasses import dataclass, field


@dataclass(frozen=True)
class BotCredentials:
    """
    Decrypted Bitvavo API credentials for one bot.

    Only ever lives in memory for the duration of a request. Both values are
    kept out of repr() so they cannot end up in logs or tracebacks.
    """
    api_key: str = field(repr=False)
    api_secret: str = field(repr=False)
    bot_id: str = ""
