from jsdocgen.lang import javascript, typescript  # noqa: F401  registers parsers
