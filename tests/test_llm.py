"""Tests for the Ollama client wrapper (no server needed)."""

from unittest.mock import MagicMock, patch

import pytest

from marvel_graphrag.llm import Completion, LLMError, OllamaLLM


def _client(content="MATCH (n) RETURN n"):
    client = MagicMock()
    client.chat.return_value = {"message": {"role": "assistant", "content": content}}
    return client


def test_client_built_from_config(config):
    config.ollama_host = "http://ollama:11434"
    config.llm_timeout = 5.0
    with patch("marvel_graphrag.llm.ollama") as mock_ollama:
        llm = OllamaLLM(config)
    mock_ollama.Client.assert_called_once_with(host="http://ollama:11434", timeout=5.0)
    assert llm.client is mock_ollama.Client.return_value


def test_generate_sends_single_user_message(config):
    client = _client()
    llm = OllamaLLM(config, client=client)

    completions = llm.generate("Who is Thor?", temperature=0.1)

    assert completions == [Completion(text="MATCH (n) RETURN n")]
    client.chat.assert_called_once_with(
        model=config.ollama_model,
        messages=[{"role": "user", "content": "Who is Thor?"}],
        options={"temperature": 0.1},
    )


def test_generate_without_temperature_uses_server_default(config):
    client = _client()
    OllamaLLM(config, client=client).generate("hi")
    assert client.chat.call_args.kwargs["options"] is None


@pytest.mark.parametrize("content", ["", "   \n", None])
def test_blank_content_gives_no_completions(config, content):
    llm = OllamaLLM(config, client=_client(content))
    assert llm.generate("hi") == []


def test_request_failure_raises_llm_error(config):
    client = MagicMock()
    client.chat.side_effect = ConnectionError("connection refused")
    llm = OllamaLLM(config, client=client)

    with pytest.raises(LLMError, match="connection refused"):
        llm.generate("hi")


def test_is_available(config):
    client = MagicMock()
    assert OllamaLLM(config, client=client).is_available()
    client.list.assert_called_once()


def test_is_not_available_when_list_fails(config):
    client = MagicMock()
    client.list.side_effect = ConnectionError("refused")
    assert not OllamaLLM(config, client=client).is_available()
