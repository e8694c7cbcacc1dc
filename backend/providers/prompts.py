"""
Prompt construction for repository documentation.

The prompt is a pure function of the snapshot: identical snapshots always
produce byte-identical prompts.
"""

import json
from typing import Any, Dict, List

from config import MAX_README_CHARS, MAX_MANIFEST_CHARS
from models import RepositorySnapshot

DOCUMENTATION_SECTIONS = [
    "Project Overview",
    "Installation Instructions",
    "Usage Guide",
    "API Documentation (if applicable)",
    "Contributing Guidelines",
    "License Information",
]


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}\n\n[... truncated {len(text) - limit} characters]"


def serialize_file_tree(snapshot: RepositorySnapshot) -> str:
    entries: List[Dict[str, Any]] = []
    for entry in snapshot.file_tree:
        item: Dict[str, Any] = {"name": entry.name, "path": entry.path, "type": entry.kind.value}
        if entry.size is not None:
            item["size"] = entry.size
        entries.append(item)
    return json.dumps(entries, indent=2)


def build_prompt(snapshot: RepositorySnapshot, include_manifests: bool = True) -> str:
    readme = truncate(snapshot.readme, MAX_README_CHARS) if snapshot.readme else "No README found"

    parts = [
        "Generate comprehensive documentation for the following GitHub repository:",
        "",
        f"Repository Name: {snapshot.name}",
        f"Description: {snapshot.description or 'No description provided'}",
        f"Language: {snapshot.language or 'Unknown'}",
        f"Stars: {snapshot.stars}",
        f"Forks: {snapshot.forks}",
        "",
        "File Structure:",
        serialize_file_tree(snapshot),
        "",
        "README Content:",
        readme,
    ]

    if include_manifests and snapshot.manifest_files:
        parts += ["", "Manifest Files:"]
        for filename in sorted(snapshot.manifest_files):
            parts.append(f"--- {filename} ---")
            parts.append(truncate(snapshot.manifest_files[filename], MAX_MANIFEST_CHARS))

    parts += ["", "Please generate a comprehensive documentation that includes:"]
    parts += [f"{i}. {section}" for i, section in enumerate(DOCUMENTATION_SECTIONS, 1)]
    parts += ["", "Format the response in Markdown."]
    return "\n".join(parts) + "\n"
