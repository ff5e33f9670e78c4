from __future__ import annotations

from sqlalchemy import Select

from catalog.models import Editor
from catalog.repositories.base import Repository


class EditorRepository(Repository[Editor]):
    model = Editor

    def ordered_by_name(self) -> Select:
        return self.query().order_by(Editor.name.asc(), Editor.id.asc())
