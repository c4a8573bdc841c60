from pathlib import Path

# ============================================================================
# PATHS
# ============================================================================

# The root directory of the project.
# All other paths are defined relative to this directory so the structure
# remains consistent no matter where the code is run.
PROJECT_ROOT = Path(__file__).parent.parent

# The folder scanned by the `load` command. Every file with a supported
# extension (see SUPPORTED_EXTENSIONS) becomes one document, and the folder is
# walked recursively.
DOCUMENTS_DIR = PROJECT_ROOT / "documents"

# This is the directory where ChromaDB keeps its files. The store is opened
# (and created if it does not exist yet) at every start, so fragments indexed
# in a previous session are still there when the assistant is launched again.
VECTOR_DB_DIR = PROJECT_ROOT / "rag_db"

# ============================================================================
# OLLAMA SERVICES
# ============================================================================

# Address of the local Ollama server. Both the embedding endpoint
# (/api/embed) and the generation endpoint (/api/generate) live under it.
OLLAMA_BASE_URL = "http://127.0.0.1:11434"

# The embedding model turns each fragment (and each question) into a vector.
# It is important to use the EXACT same embedding model for indexing and
# querying: vectors produced by different models live in incompatible spaces
# and the similarity search stops making sense.
EMBEDDING_MODEL = "nomic-embed-text"

# The model that writes the final answer from the assembled context.
LLM_MODEL = "llama3.2"

# Sampling temperature forwarded to Ollama in the request `options`.
# Set it to None to let the model use its own default.
LLM_TEMPERATURE = 0.1

# Every HTTP call to Ollama gives up after this many seconds. A timeout is
# reported like any other transport failure.
REQUEST_TIMEOUT_SECONDS = 60

# ============================================================================
# TEXT CHUNKING PARAMETERS
# ============================================================================

# Documents are cut into windows of whitespace-separated WORDS (not
# characters). 400 words is roughly a couple of paragraphs, enough for the
# fragment to make sense on its own once it is pulled back out of the store.
CHUNK_SIZE = 400

# Fraction of each window shared with the next one. With 0.25 the window
# advances by 300 words, so the last 100 words of a fragment are repeated at
# the start of the following one and a sentence cut at the boundary still
# appears whole somewhere.
CHUNK_OVERLAP = 0.25

# Only files with these extensions are treated as documents.
SUPPORTED_EXTENSIONS = [".txt"]

# ============================================================================
# RETRIEVAL PARAMETERS
# ============================================================================

# How many fragments are requested from the vector store per question. The
# value is clamped to the number of fragments actually stored.
TOP_K_RESULTS = 10

# Hard cap, in characters, on the context pasted into the prompt. Fragments
# are taken in similarity order until the next one would not fit.
MAX_CONTEXT_CHARS = 4000

# ============================================================================
# CHROMADB SETTINGS
# ============================================================================

# Name of the collection holding the fragments and their embeddings.
COLLECTION_NAME = "docs"

# Cosine compares the direction of the vectors (their meaning) rather than
# their magnitude, which varies with the length of the text.
DISTANCE_METRIC = "cosine"

# ============================================================================
# DIAGNOSTICS
# ============================================================================

# Level for the standard `logging` output. At "INFO" every question also logs
# the start of its prompt and the raw model answer, plus one line per indexed
# document; "WARNING" keeps only failures.
LOG_LEVEL = "INFO"

# Number of prompt characters written to the log for each question.
PROMPT_PREVIEW_CHARS = 200
