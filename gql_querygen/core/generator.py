"""Code generator for query modules.

Renders Jinja2 templates to produce one Python module per operation from
the synthesized definitions.

Supports custom templates via the template_dir parameter:
    generator = CodeGenerator(output_dir, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

import ast
import logging
import os
from pathlib import Path
from typing import Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .hooks import HookRunner
from .naming import to_snake_case
from .synthesizer import (
    EnumDef,
    FieldType,
    GeneratedModule,
    ListType,
    LiteralType,
    OptionalType,
    StructDef,
    StructField,
    TaggedUnionDef,
)

logger = logging.getLogger(__name__)

MODULE_TEMPLATE = "module.py.j2"


def py_type(field_type: FieldType) -> str:
    """Render a field type as a Python annotation."""
    if isinstance(field_type, OptionalType):
        return f"Optional[{py_type(field_type.of)}]"
    if isinstance(field_type, ListType):
        return f"List[{py_type(field_type.of)}]"
    if isinstance(field_type, LiteralType):
        return f"Literal[{field_type.value!r}]"
    return field_type.name


def field_line(struct_field: StructField) -> str:
    """Render one model field, e.g. `home_planet: Optional[str] = Field(default=None, alias="homePlanet")`."""
    annotation = f"{struct_field.name}: {py_type(struct_field.type)}"
    arguments = []
    if struct_field.has_default:
        arguments.append(f"default={struct_field.default!r}")
    if struct_field.alias != struct_field.name:
        arguments.append(f"alias={struct_field.alias!r}")
    if struct_field.description:
        arguments.append(f"description={struct_field.description!r}")
    if not arguments:
        return annotation
    if arguments == [f"default={struct_field.default!r}"]:
        return f"{annotation} = {struct_field.default!r}"
    return f"{annotation} = Field({', '.join(arguments)})"


def triple_quote(text: str) -> str:
    """Render text as a triple-quoted literal that evaluates back to the same string."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"""', '\\"\\"\\"')
        .replace("\r", "\\r")
    )
    if escaped.endswith('"'):
        escaped = escaped[:-1] + '\\"'
    return f'"""{escaped}"""'


def safe_docstring(text: str) -> str:
    """Escape text for use in docstrings."""
    if not text:
        return ""
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if text.endswith('"'):
        text += " "
    return text


class CodeGenerator:
    """Generates Python modules from synthesized operations.

    Templates in template_dir take precedence over built-in templates.

    Available templates to override:
        - module.py.j2: the whole operation module

    Example:
        generator = CodeGenerator(
            output_dir="./generated",
            template_dir="./my_templates",
        )
        generator.generate(modules)
    """

    def __init__(
        self,
        output_dir: str | None = None,
        template_dir: Optional[str] = None,
        hooks: HookRunner | None = None,
    ):
        """Initialize the code generator.

        Args:
            output_dir: Directory where generated modules will be written
            template_dir: Optional directory with custom Jinja2 templates.
                          Templates here override the built-in templates.
            hooks: Pre- and post-generation hooks to apply
        """
        self.output_dir = output_dir
        self.template_dir = template_dir
        self.hooks = hooks or HookRunner()

        # Build template loader - custom templates take precedence
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_querygen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        # Register custom filters
        self.env.filters["py_type"] = py_type
        self.env.filters["field_line"] = field_line
        self.env.filters["triple_quote"] = triple_quote
        self.env.filters["safe_docstring"] = safe_docstring
        self.env.filters["repr"] = repr
        self.env.tests["struct"] = lambda d: isinstance(d, StructDef)
        self.env.tests["tagged_union"] = lambda d: isinstance(d, TaggedUnionDef)
        self.env.tests["enum"] = lambda d: isinstance(d, EnumDef)

    @staticmethod
    def module_filename(module: GeneratedModule) -> str:
        return f"{to_snake_case(module.operation_name)}.py"

    def render(self, module: GeneratedModule) -> str:
        """Render one operation module, validating that it is valid Python."""
        module = self.hooks.run_pre_hooks(module)
        filename = self.module_filename(module)
        template = self.env.get_template(MODULE_TEMPLATE)
        content = template.render(
            module=module,
            structs=[d for d in module.definitions if isinstance(d, StructDef)],
        )

        # Validate Python syntax
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise ValueError(
                f"Generated invalid Python for {filename}: {e}\n"
                f"Template: {MODULE_TEMPLATE}"
            )
        return self.hooks.run_post_hooks(filename, content)

    def generate(self, modules: list[GeneratedModule]) -> list[str]:
        """Render and write each module; returns the written paths."""
        if not self.output_dir:
            raise ValueError("CodeGenerator needs an output_dir to write files")
        os.makedirs(self.output_dir, exist_ok=True)
        written = []
        for module in modules:
            full_path = os.path.join(self.output_dir, self.module_filename(module))
            content = self.render(module)
            with open(full_path, "w", encoding="utf-8") as f:
                f.write(content)
            logger.debug("Wrote %s", full_path)
            written.append(full_path)

        init_path = os.path.join(self.output_dir, "__init__.py")
        if not os.path.exists(init_path):
            with open(init_path, "w", encoding="utf-8") as f:
                f.write('"""Generated GraphQL query bindings."""\n')
        return written
