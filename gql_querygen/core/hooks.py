"""Hooks around rendering a generated operation module.

A pre-generate hook sees the synthesized definitions of one operation and
may change them (rename nothing that other definitions refer to). A
post-generate hook sees the rendered source of one file and returns the text
to write.

    from gql_querygen.core.hooks import AddHeaderHook, HookRunner, StripDescriptionsHook

    runner = HookRunner()
    runner.add_pre_hook(StripDescriptionsHook())
    runner.add_post_hook(AddHeaderHook("# Copyright 2024 My Company"))
    CodeGenerator("generated", hooks=runner).generate(modules)
"""

from typing import Protocol, runtime_checkable

from .synthesizer import EnumDef, GeneratedModule, StructDef


@runtime_checkable
class PreGenerateHook(Protocol):
    """Adjusts a GeneratedModule before it is rendered."""

    def pre_generate(self, module: GeneratedModule) -> GeneratedModule:
        """Return the module to render (usually the same object, modified)."""
        ...


@runtime_checkable
class PostGenerateHook(Protocol):
    """Transforms the rendered text of one generated file.

    Example:
        class FormatWithBlack:
            def post_generate(self, filename: str, content: str) -> str:
                import black
                return black.format_str(content, mode=black.FileMode())
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Return the text to write for `filename` (e.g. "hero_query.py")."""
        ...


class AddHeaderHook:
    """Prepend a fixed header, separated from the module by one blank line."""

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, _filename: str, content: str) -> str:
        return self.header.rstrip("\n") + "\n\n" + content


class StripDescriptionsHook:
    """Drop schema descriptions so generated classes carry no docstrings."""

    def pre_generate(self, module: GeneratedModule) -> GeneratedModule:
        for definition in module.definitions:
            if isinstance(definition, (StructDef, EnumDef)):
                definition.description = None
            if isinstance(definition, StructDef):
                for struct_field in definition.fields:
                    struct_field.description = None
        return module


class HookRunner:
    """Runs registered hooks in the order they were added."""

    def __init__(self):
        self.pre_hooks: list[PreGenerateHook] = []
        self.post_hooks: list[PostGenerateHook] = []

    def add_pre_hook(self, hook: PreGenerateHook):
        self.pre_hooks.append(hook)

    def add_post_hook(self, hook: PostGenerateHook):
        self.post_hooks.append(hook)

    def run_pre_hooks(self, module: GeneratedModule) -> GeneratedModule:
        for hook in self.pre_hooks:
            module = hook.pre_generate(module)
        return module

    def run_post_hooks(self, filename: str, content: str) -> str:
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
