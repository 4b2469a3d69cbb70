"""
Constantes globales pour NIM Proxy.
"""

# ============================================================================
# BACKEND NVIDIA NIM
# ============================================================================
DEFAULT_NIM_API_BASE = "https://integrate.api.nvidia.com"
CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
DEFAULT_REQUEST_TIMEOUT = 180.0  # 3 minutes
CONNECT_TIMEOUT = 10.0

# Modèles sans limite de latence (timeout désactivé)
DEFAULT_UNBOUNDED_LATENCY_MODELS = (
    "moonshotai/kimi-k2-instruct",
    "moonshotai/kimi-k2-instruct-0905",
    "moonshotai/kimi-k2-thinking",
    "moonshotai/kimi-k2.5",
)

# ============================================================================
# VALEURS PAR DÉFAUT DES REQUÊTES
# ============================================================================
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096

# ============================================================================
# SSE
# ============================================================================
SSE_DATA_PREFIX = b"data: "
SSE_DONE_PAYLOAD = b"[DONE]"
SSE_EVENT_TERMINATOR = b"\n\n"
REASONING_FIELD = "reasoning_content"

# ============================================================================
# API OPENAI-COMPATIBLE
# ============================================================================
SERVICE_NAME = "OpenAI to NVIDIA NIM Proxy"
MODEL_OWNER = "nvidia-nim-proxy"
ERROR_MESSAGE_PREFIX = "NVIDIA API Error: "
ERROR_TYPE_INVALID_REQUEST = "invalid_request_error"

# ============================================================================
# MAPPING DES MODÈLES (client → NIM)
# ============================================================================
DEFAULT_MODEL_MAPPING = {
    # GPT (meilleures alternatives)
    "gpt-3.5-turbo": "meta/llama-3.1-8b-instruct",
    "gpt-4": "meta/llama-3.3-70b-instruct",
    "gpt-4-turbo": "meta/llama-3.1-405b-instruct",
    "gpt-4o": "meta/llama-3.3-70b-instruct",
    "gpt-4o-mini": "meta/llama-3.1-8b-instruct",

    # DeepSeek (raisonnement & code)
    "deepseek-r1": "deepseek-ai/deepseek-r1",
    "deepseek-v3.1": "deepseek-ai/deepseek-v3_1",
    "deepseek-v3.2": "deepseek-ai/deepseek-v3_2",
    "deepseek-r1-distill-qwen-32b": "deepseek-ai/deepseek-r1-distill-qwen-32b",
    "deepseek-r1-distill-qwen-14b": "deepseek-ai/deepseek-r1-distill-qwen-14b",
    "deepseek-r1-distill-qwen-7b": "deepseek-ai/deepseek-r1-distill-qwen-7b",
    "deepseek-r1-distill-llama-70b": "deepseek-ai/deepseek-r1-distill-llama-70b",
    "deepseek-r1-distill-llama-8b": "deepseek-ai/deepseek-r1-distill-llama-8b",

    # Kimi (contexte 256K)
    "kimi": "moonshotai/kimi-k2-instruct",
    "kimi-k2": "moonshotai/kimi-k2-instruct",
    "kimi-k2-instruct": "moonshotai/kimi-k2-instruct",
    "kimi-k2-instruct-0905": "moonshotai/kimi-k2-instruct-0905",
    "kimi-k2-thinking": "moonshotai/kimi-k2-thinking",
    "kimi-k2.5": "moonshotai/kimi-k2.5",
    "kimi-2.5": "moonshotai/kimi-k2.5",

    # Qwen raisonnement
    "qwen-thinking": "qwen/qwen3-next-80b-a3b-thinking",
    "qwen3-next-thinking": "qwen/qwen3-next-80b-a3b-thinking",
    "qwen3-next-80b-thinking": "qwen/qwen3-next-80b-a3b-thinking",
    "qwen3-next-instruct": "qwen/qwen3-next-80b-a3b-instruct",
    "qwen3-235b": "qwen/qwen3-235b-a22b",
    "qwen3-30b": "qwen/qwen3-30b-a3b",
    "qwq-32b": "qwen/qwq-32b-preview",

    # GLM (Zhipu AI)
    "glm-4.7": "z-ai/glm4_7",
    "glm4.7": "z-ai/glm4_7",

    # Meta Llama
    "llama-3.1-405b": "meta/llama-3.1-405b-instruct",
    "llama-3.1-70b": "meta/llama-3.1-70b-instruct",
    "llama-3.1-8b": "meta/llama-3.1-8b-instruct",
    "llama-3.2-1b": "meta/llama-3.2-1b-instruct",
    "llama-3.2-3b": "meta/llama-3.2-3b-instruct",
    "llama-3.3-70b": "meta/llama-3.3-70b-instruct",

    # NVIDIA Nemotron
    "nemotron-ultra": "nvidia/llama-3.1-nemotron-ultra-253b-v1",
    "nemotron-70b": "nvidia/llama-3.1-nemotron-70b-instruct",
    "nemotron-nano": "nvidia/nemotron-3-nano-30b-a3b",
    "nemotron-super": "nvidia/llama-3.3-nemotron-super-49b-v1",

    # Google Gemma
    "gemma-27b": "google/gemma-2-27b-it",
    "gemma-9b": "google/gemma-2-9b-it",
    "gemma-2b": "google/gemma-2-2b-it",

    # Qwen standard
    "qwen-72b": "qwen/qwen2.5-72b-instruct",
    "qwen-32b": "qwen/qwen2.5-32b-instruct",
    "qwen-14b": "qwen/qwen2.5-14b-instruct",
    "qwen-7b": "qwen/qwen2.5-7b-instruct",

    # Mistral / Mixtral
    "mixtral-8x7b": "mistralai/mixtral-8x7b-instruct-v0.1",
    "mixtral-8x22b": "mistralai/mixtral-8x22b-instruct-v0.1",
    "mistral-7b": "mistralai/mistral-7b-instruct-v0.3",

    # Microsoft Phi
    "phi-3": "microsoft/phi-3-medium-4k-instruct",
    "phi-3-small": "microsoft/phi-3-small-8k-instruct",
    "phi-3-mini": "microsoft/phi-3-mini-128k-instruct",

    # Claude (meilleures alternatives)
    "claude-3-opus": "meta/llama-3.1-405b-instruct",
    "claude-3-sonnet": "meta/llama-3.3-70b-instruct",
    "claude-3-haiku": "meta/llama-3.1-8b-instruct",
}
