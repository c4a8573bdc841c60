"""
HTTP client for the two Ollama endpoints the assistant relies on.

- POST /api/embed     {model, input}                 -> {embeddings: [[float]]}
- POST /api/generate  {model, prompt, stream: false} -> {response: str}

Request and response bodies are pydantic models, so a change in Ollama's
schema surfaces as a TransportError instead of a KeyError deep in the
pipeline.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from langchain_core.embeddings import Embeddings
from pydantic import BaseModel, Field, ValidationError

from src.exceptions import TransportError

logger = logging.getLogger(__name__)


class EmbedRequest(BaseModel):
    """Body of a POST to /api/embed."""

    model: str = Field(description="Name of the embedding model, e.g. 'nomic-embed-text'.")
    input: str = Field(description="The text to embed.")


class EmbedResponse(BaseModel):
    """Body returned by /api/embed. Only the first vector is used."""

    embeddings: List[List[float]] = Field(description="One vector per input text.")


class GenerateRequest(BaseModel):
    """Body of a POST to /api/generate."""

    model: str = Field(description="Name of the generation model.")
    prompt: str = Field(description="The full prompt, context included.")
    stream: bool = Field(default=False, description="Always False: the answer arrives in one body.")
    options: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Model options such as temperature. Omitted when None."
    )


class GenerateResponse(BaseModel):
    """Body returned by /api/generate when streaming is off."""

    response: str = Field(description="The generated text.")


class OllamaClient:
    """
    Thin synchronous client over Ollama's native REST API.

    Every call is bounded by `timeout` seconds. Connection errors, timeouts,
    non-2xx statuses and bodies that do not match the response model are all
    raised as TransportError; callers do not need to tell them apart.
    """

    def __init__(self, base_url: str, timeout: float = 60):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _post(self, path: str, payload: BaseModel, response_model):
        url = f"{self.base_url}{path}"
        logger.debug("POST %s", url)
        try:
            response = requests.post(
                url,
                json=payload.model_dump(exclude_none=True),
                timeout=self.timeout
            )
            response.raise_for_status()
            return response_model.model_validate(response.json())
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e
        except (ValueError, ValidationError) as e:
            # ValueError covers a body that is not JSON at all.
            raise TransportError(f"Unexpected response from {url}: {e}") from e

    def embed(self, model: str, text: str) -> List[float]:
        """
        Returns the embedding vector of `text`.

        :raises TransportError: If the call fails or no vector comes back.
        """
        result = self._post("/api/embed", EmbedRequest(model=model, input=text), EmbedResponse)
        if not result.embeddings:
            raise TransportError(f"Embedding model {model!r} returned no vectors")
        return result.embeddings[0]

    def generate(self, model: str, prompt: str, options: Optional[Dict[str, Any]] = None) -> str:
        """
        Returns the raw text generated for `prompt`.

        :raises TransportError: If the call fails.
        """
        request = GenerateRequest(model=model, prompt=prompt, stream=False, options=options)
        return self._post("/api/generate", request, GenerateResponse).response


class OllamaEmbeddings(Embeddings):
    """LangChain embeddings backed by `OllamaClient.embed`, one request per text."""

    def __init__(self, client: OllamaClient, model: str):
        self.client = client
        self.model = model

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_query(text) for text in texts]

    def embed_query(self, text: str) -> List[float]:
        return self.client.embed(self.model, text)


def create_embeddings(model_name: str, base_url: str, timeout: float = 60) -> OllamaEmbeddings:
    """
    Initializes the connection to the Ollama server for embedding generation.

    :param model_name: The name of the embedding model to load from Ollama.
    :type model_name: str
    :param base_url: The network URL for the running Ollama server.
    :type base_url: str
    :param timeout: Seconds before a single embedding request is abandoned.
    :type timeout: float
    :return: A configured embeddings client instance.
    :rtype: OllamaEmbeddings
    """
    return OllamaEmbeddings(OllamaClient(base_url, timeout), model_name)


def check_embedding_model(embeddings: Embeddings) -> int:
    """
    Embeds a short string to check that the embedding service answers.

    :param embeddings: The configured embedding model client.
    :type embeddings: Embeddings
    :raises TransportError: If the Ollama server is not running or unreachable.
    :return: The dimension size (length) of the generated vector.
    :rtype: int
    """
    test_vector = embeddings.embed_query("test")
    return len(test_vector)
