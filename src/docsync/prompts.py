"""Prompt templates for the documentation generator.

Templates are Markdown files with $NAME placeholders. Values are substituted
per invocation and the finished prompt is passed to the generator as a single
argv element.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from string import Template

from docsync.exceptions import TemplateError

logger = logging.getLogger(__name__)

INDEX_TEMPLATE = "index-updater.md"
SESSION_TEMPLATE = "session-overview-documenter.md"

TEMPLATES_DIR = Path(__file__).parent / "templates"
PROJECT_OVERRIDE_DIR = Path(".claude") / "hooks" / "prompts"


@dataclass(frozen=True)
class PromptTemplate:
    """A loaded prompt template."""

    name: str
    text: str

    @classmethod
    def load(cls, path: Path) -> "PromptTemplate":
        """Load a template from a file.

        Raises:
            TemplateError: If the file is missing or unreadable
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise TemplateError(f"Prompt template not found: {path}") from e
        except OSError as e:
            raise TemplateError(f"Cannot read prompt template {path}: {e}") from e
        return cls(name=path.name, text=text)

    @classmethod
    def packaged(cls, name: str) -> "PromptTemplate":
        """Load one of the templates shipped with docsync."""
        return cls.load(TEMPLATES_DIR / name)

    @classmethod
    def resolve(cls, name: str, project_dir: Path | None = None) -> "PromptTemplate":
        """Load the project's override of a template, else the packaged one."""
        if project_dir is not None:
            override = Path(project_dir) / PROJECT_OVERRIDE_DIR / name
            if override.is_file():
                logger.debug(f"Using project prompt override {override}")
                return cls.load(override)
        return cls.packaged(name)

    def render(self, **values: str) -> str:
        """Substitute placeholders; unknown placeholders are left as-is."""
        return Template(self.text).safe_substitute(**values)


def build_index_prompt(
    template: PromptTemplate, artifact_path: str, modified_files: str, listing: str
) -> str:
    return template.render(
        INDEX_PATH=artifact_path,
        MODIFIED_FILES=modified_files,
        DIRECTORY_LISTING=listing,
    )


def build_session_prompt(
    template: PromptTemplate, transcript: str, doc_context: str, session_path: str
) -> str:
    return template.render(
        RELEVANT_CONTENT=transcript,
        DOC_CONTEXT=doc_context,
        SESSION_FOLDER=session_path,
    )


__all__ = [
    "INDEX_TEMPLATE",
    "SESSION_TEMPLATE",
    "PromptTemplate",
    "build_index_prompt",
    "build_session_prompt",
]
