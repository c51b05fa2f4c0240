from pathlib import Path

# Storage
DEFAULT_WORKFLOWS_DIR = Path(".flowplan/workflows")
DEFAULT_SYSTEM_PROMPTS_FILE = Path(".flowplan/system-prompts.yml")
DEFAULT_TOKENS_FILE = Path(".flowplan/tokens.yml")
WORKFLOW_FILE_SUFFIX = ".json"
WORKFLOW_TEMP_SUFFIX = ".json.tmp"

# Synthetic auto-prompt id prefixes (suffixed with the owning stage id)
MEMORY_BOARD_ID_PREFIX = "memory-board-"
MULTI_AGENT_CHAT_ID_PREFIX = "multi-agent-chat-"

# Well-known system prompt names
MEMORY_BOARD_PROMPT_NAME = "Handoff Memory Board"
MULTI_AGENT_CHAT_PROMPT_NAME = "Internal Agents Chat"
