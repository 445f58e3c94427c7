"""Read-only access to workout templates."""

from abc import ABC, abstractmethod
from typing import Iterable, List

from errors import TemplateNotFoundError
from typedefs import WorkoutTemplate


def sort_templates(templates: Iterable[WorkoutTemplate]) -> List[WorkoutTemplate]:
    return sorted(templates, key=lambda template: template.name.casefold())


class TemplateProvider(ABC):
    """Supplies immutable template snapshots.

    Creating, editing and deleting templates happens elsewhere; deleting a
    template never touches workout logs that reference it.
    """

    @abstractmethod
    def list(self) -> List[WorkoutTemplate]:
        """All templates, sorted by name."""

    @abstractmethod
    def get(self, template_id: str) -> WorkoutTemplate:
        """Template by ID.

        Raises:
            TemplateNotFoundError: If no template has this ID
        """


class InMemoryTemplateProvider(TemplateProvider):
    def __init__(self, templates: Iterable[WorkoutTemplate] = ()):
        self._templates = {t.id: t for t in templates if t.id is not None}

    def list(self) -> List[WorkoutTemplate]:
        return sort_templates(self._templates.values())

    def get(self, template_id: str) -> WorkoutTemplate:
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFoundError(template_id) from None
