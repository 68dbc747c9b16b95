import enum
import logging
import string
from dataclasses import dataclass

from opcalc.utils import PrintableEnum, SourceError

logger = logging.getLogger(__name__)


@dataclass
class TokenizerError(SourceError):
    header = "Tokenizer error"

    @property
    def char(self) -> str:
        return self.code[self.error_char_idx]


class TokenType(PrintableEnum):
    ATOM = enum.auto()
    OPERATOR = enum.auto()
    END = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    position: int

    def __str__(self) -> str:
        return f"<{self.type}>{self.lexeme}"


ATOM_CHARS = frozenset(string.digits + string.ascii_letters + ".")
OPERATOR_CHARS = frozenset("+-*/^=")


def tokenize(code: str) -> list[Token]:
    tokens: list[Token] = []
    for i, char in enumerate(code):
        if char in ATOM_CHARS:
            tokens.append(Token(type=TokenType.ATOM, lexeme=char, position=i))
        elif char in OPERATOR_CHARS:
            tokens.append(Token(type=TokenType.OPERATOR, lexeme=char, position=i))
        elif char.isspace():
            pass
        else:
            raise TokenizerError(f"Unexpected character: {char!r}", code=code, error_char_idx=i)
    logger.debug("Tokenized %r into %d tokens", code, len(tokens))
    return tokens


class TokenStream:
    """One-token-lookahead cursor over a token list.

    Reading past the last token yields an END token every time instead of failing.
    """

    def __init__(self, tokens: list[Token], code: str = "") -> None:
        self.tokens = tokens
        self.code = code
        self.idx = 0
        end_position = len(code) if code else (tokens[-1].position + 1 if tokens else 0)
        self._end = Token(type=TokenType.END, lexeme="", position=end_position)

    def peek(self) -> Token:
        if self.idx < len(self.tokens):
            return self.tokens[self.idx]
        return self._end

    def next(self) -> Token:
        token = self.peek()
        if token.type is not TokenType.END:
            self.idx += 1
        return token
