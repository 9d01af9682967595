import pytest

from learnhub.models.module.step_model import StepCheckpoint
from learnhub.models.progress.user_step_progress_model import UserStepProgress
from learnhub.services.errors import NotFoundError
from learnhub.services.progression_service import (
    ProgressionService,
    compute_unlocked_flags,
    module_status,
)
from tests.utils import create_module_graph, create_user


def _step_ids(module):
    return [step.id for step in module.steps]


def test_only_first_step_is_unlocked_without_progress(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(0, 1, 2))

    view = ProgressionService(db_session, user.id).get_module_with_steps(module.id)

    assert [step.is_unlocked for step in view.steps] == [True, False, False]
    assert view.current_step_index == 0
    assert view.completed_steps == 0
    assert view.status == "not_started"
    assert view.module_score == 0


def test_locked_steps_hide_their_checkpoints(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(0, 1, 2))

    view = ProgressionService(db_session, user.id).get_module_with_steps(module.id)

    first, second, third = view.steps
    assert first.checkpoints is not None
    assert first.checkpoints[0].correct_option_index is None
    assert first.checkpoints[0].explanation is None
    assert second.checkpoints is None
    assert third.checkpoints is None


@pytest.mark.parametrize("selected", [0, 3])
def test_any_answer_unlocks_the_next_step(db_session, selected):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(0, 1, 2))
    first_id = _step_ids(module)[0]

    service = ProgressionService(db_session, user.id)
    result = service.submit_step_checkpoint(first_id, selected)

    assert result.unlock_next is True
    assert result.correct is (selected == 0)
    view = service.get_module_with_steps(module.id)
    assert [step.is_unlocked for step in view.steps] == [True, True, False]


def test_resubmission_overwrites_the_progress_row(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(2,))
    step_id = _step_ids(module)[0]

    service = ProgressionService(db_session, user.id)
    assert service.submit_step_checkpoint(step_id, 1).correct is False
    assert service.submit_step_checkpoint(step_id, 2).correct is True

    rows = db_session.query(UserStepProgress).filter_by(user_id=user.id, step_id=step_id).all()
    assert len(rows) == 1
    assert rows[0].selected_answer_index == 2
    assert rows[0].is_correct is True
    assert rows[0].completed_at is not None


def test_three_step_walkthrough_scores_and_positions(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(0, 1, 2))
    first_id, second_id, _ = _step_ids(module)

    service = ProgressionService(db_session, user.id)
    service.submit_step_checkpoint(first_id, 0)
    service.submit_step_checkpoint(second_id, 0)

    view = service.get_module_with_steps(module.id)
    assert view.completed_steps == 2
    assert view.total_correct == 1
    assert view.total_steps == 3
    assert view.module_score == 33
    assert view.current_step_index == 2
    assert view.steps[2].is_unlocked is True
    assert view.status == "in_progress"


def test_answered_step_reveals_answer_key_and_user_choice(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(1, 2))
    first_id = _step_ids(module)[0]

    service = ProgressionService(db_session, user.id)
    service.submit_step_checkpoint(first_id, 3)

    checkpoint = service.get_module_with_steps(module.id).steps[0].checkpoints[0]
    assert checkpoint.correct_option_index == 1
    assert checkpoint.explanation == "Because of step 1"
    assert checkpoint.user_answer == 3
    assert checkpoint.was_correct is False


def test_unevaluated_checkpoints_still_count_towards_module_score(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(0, 0), is_evaluated=False)

    service = ProgressionService(db_session, user.id)
    for step_id in _step_ids(module):
        service.submit_step_checkpoint(step_id, 0)

    view = service.get_module_with_steps(module.id)
    assert view.module_score == 100
    assert view.status == "completed"
    assert view.current_step_index == 1


def test_mark_step_complete_unlocks_without_counting_as_correct(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(None, 0))
    first_id = _step_ids(module)[0]

    service = ProgressionService(db_session, user.id)
    progress = service.mark_step_complete(first_id)

    assert progress.is_correct is None
    assert progress.selected_answer_index is None
    view = service.get_module_with_steps(module.id)
    assert view.steps[0].is_completed is True
    assert view.steps[1].is_unlocked is True
    assert view.total_correct == 0
    assert view.current_step_index == 1


def test_checkpoint_id_only_selects_feedback(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(1,))
    step = module.steps[0]
    step.checkpoints.append(
        StepCheckpoint(
            question="Second question",
            options=["A", "B", "C", "D"],
            correct_option_index=3,
            explanation="Second explanation",
            order=2,
        )
    )
    db_session.commit()
    second_checkpoint_id = step.checkpoints[1].id

    result = ProgressionService(db_session, user.id).submit_step_checkpoint(
        step.id, 1, checkpoint_id=second_checkpoint_id
    )

    assert result.correct is True
    assert result.correct_answer_index == 3
    assert result.explanation == "Second explanation"


def test_submit_on_step_without_checkpoint_raises(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(None,))

    with pytest.raises(NotFoundError) as exc_info:
        ProgressionService(db_session, user.id).submit_step_checkpoint(module.steps[0].id, 0)

    assert exc_info.value.status_code == 404
    assert db_session.query(UserStepProgress).count() == 0


def test_unknown_module_and_step_raise_not_found(db_session):
    user = create_user(db_session)
    service = ProgressionService(db_session, user.id)

    with pytest.raises(NotFoundError):
        service.get_module_with_steps(999)
    with pytest.raises(NotFoundError):
        service.mark_step_complete(999)


def test_module_without_steps_has_no_score(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, checkpoint_keys=())

    view = ProgressionService(db_session, user.id).get_module_with_steps(module.id)

    assert view.steps == []
    assert view.module_score is None
    assert view.current_step_index == 0
    assert view.status == "not_started"


def test_progress_is_kept_per_learner(db_session):
    alice = create_user(db_session, username="alice")
    bob = create_user(db_session, username="bob")
    module = create_module_graph(db_session, checkpoint_keys=(0, 0))

    ProgressionService(db_session, alice.id).submit_step_checkpoint(module.steps[0].id, 0)

    bob_view = ProgressionService(db_session, bob.id).get_module_with_steps(module.id)
    assert [step.is_unlocked for step in bob_view.steps] == [True, False]


def test_helpers_on_plain_values():
    assert compute_unlocked_flags([], {}) == []
    assert module_status(0, 0) == "not_started"
    assert module_status(1, 3) == "in_progress"
    assert module_status(3, 3) == "completed"
