import logging
from dataclasses import dataclass

from opcalc.tokenizer import Token, TokenStream, TokenType, tokenize
from opcalc.utils import SourceError

logger = logging.getLogger(__name__)


@dataclass
class ParserError(SourceError):
    header = "Parser error"


@dataclass(frozen=True)
class Atom:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class BinaryOperation:
    operator: str
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        # walk the left chain iteratively, it is as deep as the operator count
        spine = [self]
        while isinstance(spine[-1].left, BinaryOperation):
            spine.append(spine[-1].left)
        result = str(spine[-1].left)
        for node in reversed(spine):
            result = f"({node.operator}({result} {node.right}))"
        return result


Expression = Atom | BinaryOperation

ASSIGN = "="
PREFIX_OPERATORS = ("+", "-")

BINDING_QUANTITIES = {
    "=": 1,
    "+": 2,
    "-": 2,
    "*": 3,
    "/": 3,
    "^": 4,
}


def get_binding_quantity(operator: str) -> int:
    return BINDING_QUANTITIES[operator]


def parse(code: str) -> Expression:
    return parse_tokens(tokenize(code), code=code)


def parse_tokens(tokens: list[Token], code: str = "") -> Expression:
    stream = TokenStream(tokens, code=code)
    expression = _consume_expression(stream, min_bq=0)
    logger.debug("Parsed %r as %s", code, expression)
    return expression


def is_assignment(expression: Expression) -> bool:
    return isinstance(expression, BinaryOperation) and expression.operator == ASSIGN


def _error(errmsg: str, stream: TokenStream, token: Token) -> ParserError:
    return ParserError(errmsg, code=stream.code, error_char_idx=token.position)


def _consume_expression(stream: TokenStream, min_bq: int) -> Expression:
    left = _consume_operand(stream)

    while True:
        token = stream.peek()
        if token.type is TokenType.END:
            break
        if token.type is not TokenType.OPERATOR:
            raise _error(f"Operator expected, found {token.type}", stream, token)

        if token.lexeme not in BINDING_QUANTITIES:
            raise _error(f"Unknown operator: {token.lexeme!r}", stream, token)
        bq = get_binding_quantity(token.lexeme)
        if bq <= min_bq:
            # belongs to an enclosing call
            break
        stream.next()
        right = _consume_expression(stream, min_bq=bq)
        left = BinaryOperation(operator=token.lexeme, left=left, right=right)

    return left


def _consume_operand(stream: TokenStream) -> Atom:
    """Reads a run of atom characters, optionally starting with a sign"""
    first = stream.next()
    if first.type is TokenType.ATOM:
        return Atom(first.lexeme + _consume_atom_chars(stream))
    elif first.type is TokenType.OPERATOR:
        if first.lexeme not in PREFIX_OPERATORS:
            raise _error(f"Operand expected, found operator {first.lexeme!r}", stream, first)
        after_sign = stream.next()
        if after_sign.type is not TokenType.ATOM:
            raise _error(f"Operand expected after {first.lexeme!r}, found {after_sign.type}", stream, after_sign)
        return Atom(first.lexeme + after_sign.lexeme + _consume_atom_chars(stream))
    else:
        raise _error(f"Operand expected, found {first.type}", stream, first)


def _consume_atom_chars(stream: TokenStream) -> str:
    chars = []
    while stream.peek().type is TokenType.ATOM:
        chars.append(stream.next().lexeme)
    return "".join(chars)
