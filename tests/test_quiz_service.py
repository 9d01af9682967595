import pytest
from pydantic import ValidationError

from learnhub.models.module.quiz_model import QuizAttempt
from learnhub.schemas.module.quiz_schema import InlineAnswer, QuizAttemptIn
from learnhub.services.errors import NotFoundError, ValidationFailedError
from learnhub.services.quiz_service import QuizService, score_inline_answers
from learnhub.services.scoring import combine_scores, percentage, round_half_up
from tests.utils import create_module_graph, create_user


def _submit(db, user, module, answers, inline=None):
    payload = QuizAttemptIn(
        module_id=module.id,
        quiz_id=module.quiz.id,
        answers=answers,
        inline_answers=inline,
    )
    return QuizService(db, user.id).submit_attempt(payload)


def _inline(correct_flags):
    return [
        InlineAnswer(block_id=index + 1, selected_index=0, correct=flag)
        for index, flag in enumerate(correct_flags)
    ]


def test_quiz_score_is_rounded_percentage(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0,) * 7)

    result = _submit(db_session, user, module, [0, 0, 0, 1, 1, 1, 1])

    assert result.quiz_score == 43
    assert result.score == 43
    assert result.inline_score is None
    assert result.passed is False


def test_four_question_attempt_passes_at_threshold(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 1, 2, 3), passing_score=70)

    result = _submit(db_session, user, module, [0, 1, 2, 0])

    assert result.score == 75
    assert result.passed is True
    assert result.passing_score == 70


def test_inline_answers_weigh_half_of_the_final_score(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0,) * 5, passing_score=71)

    result = _submit(
        db_session,
        user,
        module,
        [0, 0, 0, 0, 1],
        inline=_inline([True, True, True, False, False]),
    )

    assert result.quiz_score == 80
    assert result.inline_score == 60
    assert result.score == 70
    assert result.passed is False


def test_score_equal_to_passing_score_passes(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0,) * 5, passing_score=70)

    result = _submit(
        db_session,
        user,
        module,
        [0, 0, 0, 0, 1],
        inline=_inline([True, True, True, False, False]),
    )

    assert result.score == 70
    assert result.passed is True


def test_empty_inline_list_is_ignored(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 0))

    result = _submit(db_session, user, module, [0, 1], inline=[])

    assert result.inline_score is None
    assert result.score == 50


def test_answer_count_mismatch_is_rejected_without_recording(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 0, 0))

    with pytest.raises(ValidationFailedError) as exc_info:
        _submit(db_session, user, module, [0, 0])

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Answer count doesn't match question count"
    assert db_session.query(QuizAttempt).count() == 0


def test_quiz_without_questions_scores_zero(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=())

    result = _submit(db_session, user, module, [])

    assert result.score == 0
    assert result.passed is False


def test_unknown_quiz_raises_not_found(db_session):
    user = create_user(db_session)
    payload = QuizAttemptIn(module_id=1, quiz_id=42, answers=[0])

    with pytest.raises(NotFoundError):
        QuizService(db_session, user.id).submit_attempt(payload)


def test_quiz_from_another_module_is_rejected(db_session):
    user = create_user(db_session)
    first = create_module_graph(db_session, title="First", quiz_keys=(0,))
    second = create_module_graph(db_session, title="Second", quiz_keys=(0,))

    payload = QuizAttemptIn(module_id=second.id, quiz_id=first.quiz.id, answers=[0])
    with pytest.raises(ValidationFailedError):
        QuizService(db_session, user.id).submit_attempt(payload)
    assert db_session.query(QuizAttempt).count() == 0


def test_attempt_row_keeps_answers_and_partial_scores(db_session):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 1))

    _submit(db_session, user, module, [0, 0], inline=_inline([True]))

    attempt = db_session.query(QuizAttempt).one()
    assert attempt.user_id == user.id
    assert attempt.module_id == module.id
    assert attempt.answers == [0, 0]
    assert attempt.quiz_score == 50
    assert attempt.inline_score == 100
    assert attempt.score == 75
    assert attempt.inline_answers == [{"block_id": 1, "selected_index": 0, "correct": True}]


def test_scoring_rounds_halves_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.49) == 0
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
    assert percentage(1, 0) == 0
    assert combine_scores(75, 50) == 63
    assert combine_scores(40, None) == 40
    assert score_inline_answers(None) is None


@pytest.mark.parametrize(
    "answers",
    [
        None,
        [False, True, 2, 3],
        [0, 1, 2, 3.0],
        [0, 1, 2, "3"],
    ],
)
def test_answers_must_be_strict_integers(db_session, answers):
    user = create_user(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 1, 2, 3))

    with pytest.raises(ValidationFailedError) as exc_info:
        _submit(db_session, user, module, answers)

    assert exc_info.value.status_code == 400
    assert db_session.query(QuizAttempt).count() == 0


def test_inline_answers_are_not_coerced():
    with pytest.raises(ValidationError):
        InlineAnswer(block_id=1, selected_index=True, correct=True)
    with pytest.raises(ValidationError):
        InlineAnswer(block_id=1, selected_index=0, correct="yes")
