"""Tests for generation hooks."""

import pytest

from gql_querygen.core.hooks import (
    AddHeaderHook,
    HookRunner,
    PostGenerateHook,
    PreGenerateHook,
    StripDescriptionsHook,
)
from gql_querygen.core.synthesizer import EnumDef, GeneratedModule, NamedType, StructDef, StructField


@pytest.fixture
def sample_module():
    """A small synthesized module with described definitions."""
    return GeneratedModule(
        definitions=[
            EnumDef(name="Episode", values=[("JEDI", "JEDI")], description="A film."),
            StructDef(name="Variables", kind="input"),
            StructDef(
                name="ResponseData",
                kind="response",
                graphql_type="Query",
                description="Root query.",
                fields=[StructField("hero", "hero", NamedType("str"), description="The hero.")],
            ),
        ],
        operation_name="HeroQuery",
        binding_name="HeroQuery",
    )


class TestAddHeaderHook:
    """Tests for AddHeaderHook."""

    @pytest.mark.parametrize("header", ["# Header", "# Header\n", "# Header\n\n"])
    def test_single_blank_line_after_header(self, header):
        assert AddHeaderHook(header).post_generate("hero_query.py", "code") == "# Header\n\ncode"

    def test_multiline_header(self):
        result = AddHeaderHook("# line one\n# line two").post_generate("hero_query.py", "x = 1\n")
        assert result == "# line one\n# line two\n\nx = 1\n"


class TestStripDescriptionsHook:
    def test_clears_descriptions(self, sample_module):
        module = StripDescriptionsHook().pre_generate(sample_module)
        assert module.get("Episode").description is None
        response = module.get("ResponseData")
        assert response.description is None
        assert response.fields[0].description is None
        assert response.graphql_type == "Query"


class TestHookRunner:
    """Tests for HookRunner."""

    def test_pre_hooks_run_in_order(self, sample_module):
        calls = []

        class Record:
            def __init__(self, label):
                self.label = label

            def pre_generate(self, module):
                calls.append(self.label)
                return module

        runner = HookRunner()
        runner.add_pre_hook(Record("first"))
        runner.add_pre_hook(Record("second"))
        runner.run_pre_hooks(sample_module)
        assert calls == ["first", "second"]

    def test_pre_hook_can_replace_definitions(self, sample_module):
        class DropEnums:
            def pre_generate(self, module):
                module.definitions = [d for d in module.definitions if not isinstance(d, EnumDef)]
                return module

        runner = HookRunner()
        runner.add_pre_hook(DropEnums())
        result = runner.run_pre_hooks(sample_module)
        assert [d.name for d in result.definitions] == ["Variables", "ResponseData"]

    def test_post_hooks_chain(self):
        runner = HookRunner()
        runner.add_post_hook(AddHeaderHook("# inner"))
        runner.add_post_hook(AddHeaderHook("# outer"))
        assert runner.run_post_hooks("q.py", "code") == "# outer\n\n# inner\n\ncode"

    def test_post_hooks_see_filename(self):
        seen = []

        class Record:
            def post_generate(self, filename, content):
                seen.append(filename)
                return content

        runner = HookRunner()
        runner.add_post_hook(Record())
        runner.run_post_hooks("hero_query.py", "code")
        assert seen == ["hero_query.py"]

    def test_no_hooks_is_identity(self, sample_module):
        runner = HookRunner()
        assert runner.run_pre_hooks(sample_module) is sample_module
        assert runner.run_post_hooks("q.py", "code") == "code"


class TestProtocols:
    def test_builtin_hooks(self):
        assert isinstance(AddHeaderHook("# x"), PostGenerateHook)
        assert isinstance(StripDescriptionsHook(), PreGenerateHook)
        assert not isinstance(StripDescriptionsHook(), PostGenerateHook)
