from typing import Optional

import tree_sitter as ts
import tree_sitter_javascript as tsjs

from jsdocgen.parsers import AbstractSignatureParser, Dialect

JS_LANGUAGE = ts.Language(tsjs.language())
_parser: Optional[ts.Parser] = None


def _get_parser() -> ts.Parser:
    global _parser
    if _parser is None:
        _parser = ts.Parser(JS_LANGUAGE)
    return _parser


class JavaScriptSignatureParser(AbstractSignatureParser):
    dialect = Dialect.JAVASCRIPT
    extensions = [".js", ".jsx", ".mjs", ".cjs"]

    def _create_parser(self) -> ts.Parser:
        return _get_parser()
