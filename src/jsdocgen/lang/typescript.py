from typing import Optional

import tree_sitter as ts
import tree_sitter_typescript as tsts

from jsdocgen.parsers import AbstractSignatureParser, Dialect

TS_LANGUAGE = ts.Language(tsts.language_typescript())
TSX_LANGUAGE = ts.Language(tsts.language_tsx())
_parser: Optional[ts.Parser] = None
_tsx_parser: Optional[ts.Parser] = None


def _get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(TS_LANGUAGE)
    return _parser


def _get_tsx_parser() -> ts.Parser:
    global _tsx_parser
    if _tsx_parser is None:
        _tsx_parser = ts.Parser(TSX_LANGUAGE)
    return _tsx_parser


class TypeScriptSignatureParser(AbstractSignatureParser):
    dialect = Dialect.TYPESCRIPT
    extensions = [".ts", ".mts", ".cts"]

    def _create_parser(self) -> ts.Parser:
        return _get_parser()


class TsxSignatureParser(TypeScriptSignatureParser):
    """TypeScript with JSX; angle bracket casts are not available here."""

    dialect = Dialect.TSX
    extensions = [".tsx"]

    def _create_parser(self) -> ts.Parser:
        return _get_tsx_parser()
