"""Error types raised while generating code from a hyperschema."""


class HyperschemaError(Exception):
    """Base class for every error raised by the generator."""


class ShapeError(HyperschemaError):
    """A schema node has a shape the generator does not know how to handle."""


class NoPropertiesDefinedError(ShapeError):
    """An object schema declares no properties."""


class MultiplePlaceholderError(HyperschemaError):
    """A link href contains more than one identity placeholder."""


class UnresolvableReferenceError(HyperschemaError):
    """A $ref cannot be resolved against the document."""


class CompilerError(HyperschemaError):
    """The external schema-to-declarations compiler failed."""


class OverlappingRulesError(HyperschemaError, ValueError):
    """A declaration name appears in more than one rewrite rule set."""


class DeclarationSyntaxError(HyperschemaError):
    """Declaration source could not be parsed."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"{message} (line {line}, column {column})")
        self.line = line
        self.column = column
