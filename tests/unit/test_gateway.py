"""Tests for the backend gateway."""

import pytest

from longform_providers import ModelGateway, ProviderConfig
from longform_providers.exceptions import (
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    UnknownBackendError,
)
from tests.utils.providers import ScriptedProvider, always_fail


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


async def test_generate_returns_stripped_text() -> None:
    provider = ScriptedProvider("alpha", "  Section body.  \n")
    gateway = ModelGateway({"alpha": provider})

    text = await gateway.generate("alpha", "system", "user", stage="writing")

    assert text == "Section body."
    request = provider.requests[0]
    assert request.system_prompt == "system"
    assert request.prompt == "user"
    assert request.metadata == {"stage": "writing", "backend": "alpha"}


async def test_unknown_backend_raises() -> None:
    gateway = ModelGateway({})
    with pytest.raises(UnknownBackendError):
        await gateway.generate("ghost", None, "user")


async def test_timeout_surfaces_as_provider_error() -> None:
    gateway = ModelGateway(
        {"slow": ScriptedProvider("slow", "late", delay=0.5)}, timeout_seconds=0.01
    )
    with pytest.raises(ProviderTimeoutError):
        await gateway.generate("slow", None, "user")


async def test_provider_errors_propagate_unchanged() -> None:
    gateway = ModelGateway({"down": ScriptedProvider("down", always_fail("quota exceeded"))})
    with pytest.raises(ProviderError, match="quota exceeded"):
        await gateway.generate("down", None, "user")


async def test_unexpected_exceptions_are_wrapped() -> None:
    gateway = ModelGateway({"odd": ScriptedProvider("odd", KeyError("choices"))})
    with pytest.raises(ProviderError) as excinfo:
        await gateway.generate("odd", None, "user")
    assert isinstance(excinfo.value.__cause__, KeyError)


@pytest.mark.parametrize("reply", ["", "   \n\t"])
async def test_empty_text_is_a_failure(reply: str) -> None:
    gateway = ModelGateway({"quiet": ScriptedProvider("quiet", reply)})
    with pytest.raises(ProviderResponseError):
        await gateway.generate("quiet", None, "user")


def test_candidates_keep_registration_order_and_filter_eu() -> None:
    gateway = ModelGateway(
        {
            "openai": ScriptedProvider("openai"),
            "mistral": ScriptedProvider("mistral", eu_hosted=True),
            "mock": ScriptedProvider("mock"),
        }
    )
    assert gateway.candidates == ["openai", "mistral", "mock"]
    assert gateway.candidates_for(eu_only=True) == ["mistral"]
    assert gateway.candidates_for() == gateway.candidates
    assert gateway.has("mock")
    assert not gateway.has(None)
    assert not gateway.has("gemini")


def test_from_configs_skips_unsupported_backends() -> None:
    gateway = ModelGateway.from_configs(
        [
            ProviderConfig(name="mock", api_key="mock", model="mock"),
            ProviderConfig(name="unheard-of", api_key="k", model="m"),
        ]
    )
    assert gateway.candidates == ["mock"]
