from typing import Any, List, Optional

from langchain_core.callbacks import CallbackManagerForLLMRun
from langchain_core.language_models.llms import LLM

from src.ollama_client import OllamaClient


class OllamaGenerateLLM(LLM):
    """
    LangChain LLM that sends the whole prompt to Ollama's /api/generate.

    Streaming is always off: the answer comes back in a single response body
    and is returned untouched.
    """

    model: str
    base_url: str = "http://127.0.0.1:11434"
    temperature: Optional[float] = None
    timeout: float = 60

    @property
    def _llm_type(self) -> str:
        return "ollama-generate"

    def _call(
        self,
        prompt: str,
        stop: Optional[List[str]] = None,
        run_manager: Optional[CallbackManagerForLLMRun] = None,
        **kwargs: Any,
    ) -> str:
        options = dict(kwargs.get("options") or {})
        if self.temperature is not None:
            options.setdefault("temperature", self.temperature)
        if stop:
            options["stop"] = stop
        client = OllamaClient(self.base_url, self.timeout)
        return client.generate(self.model, prompt, options=options or None)


def create_llm(
    model_name: str,
    base_url: str,
    temperature: Optional[float] = None,
    timeout: float = 60
) -> OllamaGenerateLLM:
    """
    Creates the language model client used to write answers.

    :param model_name: The name of the Ollama generation model.
    :type model_name: str
    :param base_url: The network URL for the running Ollama server.
    :type base_url: str
    :param temperature: Sampling temperature, or None for the model default.
    :type temperature: Optional[float]
    :param timeout: Seconds before a generation request is abandoned.
    :type timeout: float
    :return: A configured LLM instance.
    :rtype: OllamaGenerateLLM
    """
    return OllamaGenerateLLM(
        model=model_name,
        base_url=base_url,
        temperature=temperature,
        timeout=timeout
    )


def generate_answer(llm: LLM, prompt: str) -> str:
    """Sends `prompt` to the model and returns its raw text."""
    return llm.invoke(prompt)
