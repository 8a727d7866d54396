"""Static column metadata for the task grid."""

from __future__ import annotations

from cronograma.models.project import ColumnDefinition

COLUMNS: tuple[ColumnDefinition, ...] = (
    ColumnDefinition(key="Name", label="Nome da Tarefa", type="string"),
    ColumnDefinition(key="Duration", label="Duração", type="duration"),
    ColumnDefinition(key="Start", label="Início", type="date"),
    ColumnDefinition(key="Finish", label="Término", type="date"),
    ColumnDefinition(key="PercentageComplete", label="% concluída", type="number"),
)


def column_definitions() -> list[ColumnDefinition]:
    """Return a fresh list of the column definitions."""

    return [c.model_copy() for c in COLUMNS]
