"""Resolve the LSP language identifier of a file from its name."""

import os
from typing import Dict, Optional

EXTENSION_LANGUAGE_IDS: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "typescriptreact",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".json": "json",
    ".vue": "vue",
    ".svelte": "svelte",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".html": "html",
    ".py": "python",
    ".pyi": "python",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".rb": "ruby",
    ".php": "php",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".lua": "lua",
    ".sh": "sh",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".md": "markdown",
}

FILENAME_LANGUAGE_IDS: Dict[str, str] = {
    "Dockerfile": "dockerfile",
    "Makefile": "make",
    "CMakeLists.txt": "cmake",
}


def resolve_language_id(path: str) -> Optional[str]:
    name = os.path.basename(path)
    if name in FILENAME_LANGUAGE_IDS:
        return FILENAME_LANGUAGE_IDS[name]

    _, ext = os.path.splitext(name)
    if not ext:
        return None
    return EXTENSION_LANGUAGE_IDS.get(ext) or EXTENSION_LANGUAGE_IDS.get(ext.lower())
