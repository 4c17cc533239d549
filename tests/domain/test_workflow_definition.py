"""Tests for workflow definition validation and lookups."""

from uuid import uuid4

import pytest

from purchasing_kernel.domain.workflow import WorkflowDefinition, WorkflowLevel
from purchasing_kernel.exceptions import WorkflowConfigurationError

PROCESS = "Purchase Order"


def make_level(level, process=PROCESS, config_id=None) -> WorkflowLevel:
    return WorkflowLevel(
        config_id=config_id or uuid4(),
        process_name=process,
        level=level,
        role_id=uuid4(),
    )


class TestValidation:

    def test_contiguous_levels_accepted(self):
        definition = WorkflowDefinition(PROCESS, (make_level(1), make_level(2)))

        assert definition.max_level == 2
        assert not definition.is_empty

    def test_empty_definition_is_valid(self):
        assert WorkflowDefinition(PROCESS).is_empty

    @pytest.mark.parametrize("levels", [(2,), (1, 3), (1, 1)])
    def test_gaps_and_duplicates_refused(self, levels):
        with pytest.raises(WorkflowConfigurationError):
            WorkflowDefinition(PROCESS, tuple(make_level(n) for n in levels))

    def test_foreign_process_refused(self):
        with pytest.raises(WorkflowConfigurationError):
            WorkflowDefinition(PROCESS, (make_level(1, process="Sales Order"),))

    def test_duplicate_config_id_refused(self):
        shared = uuid4()
        with pytest.raises(WorkflowConfigurationError):
            WorkflowDefinition(
                PROCESS, (make_level(1, config_id=shared), make_level(2, config_id=shared)),
            )


class TestLookups:

    def test_level_and_role_lookup(self):
        first, second = make_level(1), make_level(2)
        definition = WorkflowDefinition(PROCESS, (first, second))

        assert definition.level_of(second.config_id) == 2
        assert definition.level_of(uuid4()) is None
        assert definition.level_of(None) is None
        assert definition.role_for_level(1) == first.role_id
        assert definition.role_for_level(3) is None
        assert definition.levels_from(2) == (second,)
        assert definition.role_ids == (first.role_id, second.role_id)
