import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from learnhub.api.v1.dependencies import require_admin
from learnhub.models.module.module_model import Module
from learnhub.models.module.quiz_model import Quiz, QuizAttempt, QuizQuestion
from learnhub.models.module.step_model import ModuleStep, StepCheckpoint, StepContentBlock
from learnhub.models.pathway.pathway_model import (
    GroupPathwayAssignment,
    PathwayModule,
    UserPathwayAssignment,
)
from learnhub.models.progress.user_step_progress_model import UserStepProgress
from learnhub.models.user.group_model import GroupMember, UserGroup
from learnhub.models.user.user_model import User, UserRole
from learnhub.schemas.module.quiz_schema import QuizAttemptIn, QuizQuestionIn, QuizSaveIn
from learnhub.schemas.module.step_schema import CheckpointIn, ContentBlockIn, StepIn
from learnhub.schemas.user.group_schema import GroupUpdate
from learnhub.schemas.user.user_schema import UserCreate
from learnhub.services.admin_service import AdminService
from learnhub.services.errors import ConflictError, NotFoundError, ValidationFailedError
from learnhub.services.pathway_service import PathwayService
from learnhub.services.progression_service import ProgressionService
from learnhub.services.quiz_service import QuizService
from tests.utils import (
    create_admin,
    create_group,
    create_module_graph,
    create_pathway,
    create_user,
)

CHECKPOINT = {
    "question": "Pick B",
    "options": ["A", "B", "C"],
    "correct_option_index": 1,
    "explanation": "B it is",
}


def _stored_checkpoints(db, module_id):
    rows = (
        db.query(StepCheckpoint)
        .join(ModuleStep)
        .filter(ModuleStep.module_id == module_id)
        .order_by(ModuleStep.order, StepCheckpoint.order)
        .all()
    )
    return [
        (row.question, row.options, row.correct_option_index, row.explanation, row.order)
        for row in rows
    ]


def test_legacy_single_checkpoint_matches_checkpoint_list(db_session):
    admin = create_admin(db_session)
    legacy = create_module_graph(db_session, title="Legacy", checkpoint_keys=())
    modern = create_module_graph(db_session, title="Modern", checkpoint_keys=())
    service = AdminService(db_session, admin)

    service.save_module_steps(legacy.id, [StepIn(title="Intro", checkpoint=CHECKPOINT)])
    service.save_module_steps(modern.id, [StepIn(title="Intro", checkpoints=[CHECKPOINT])])

    assert _stored_checkpoints(db_session, legacy.id) == _stored_checkpoints(db_session, modern.id)
    assert _stored_checkpoints(db_session, legacy.id) == [("Pick B", ["A", "B", "C"], 1, "B it is", 1)]


def test_step_without_checkpoint_payload_keeps_existing_checkpoints(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(2,))
    step_id = module.steps[0].id

    AdminService(db_session, admin).save_module_steps(
        module.id, [StepIn(id=step_id, title="Renamed", checkpoints=[])]
    )

    step = db_session.get(ModuleStep, step_id)
    assert step.title == "Renamed"
    assert [checkpoint.correct_option_index for checkpoint in step.checkpoints] == [2]


def test_full_replace_removes_missing_steps_and_renumbers(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    module = create_module_graph(db_session, checkpoint_keys=(0, 0, 0))
    first_id, second_id, third_id = [step.id for step in module.steps]
    ProgressionService(db_session, learner.id).submit_step_checkpoint(first_id, 0)

    steps = AdminService(db_session, admin).save_module_steps(
        module.id,
        [
            StepIn(id=third_id, title="Third first"),
            StepIn(title="Brand new", content_blocks=[ContentBlockIn(content="<p>new</p>")]),
            StepIn(id=second_id, title="Second"),
        ],
    )

    assert [(step.title, step.order) for step in steps] == [
        ("Third first", 1),
        ("Brand new", 2),
        ("Second", 3),
    ]
    assert db_session.get(ModuleStep, first_id) is None
    assert db_session.query(UserStepProgress).filter_by(step_id=first_id).count() == 0
    assert [block.order for block in steps[1].content_blocks] == [1]


def test_incomplete_checkpoints_are_skipped(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session, checkpoint_keys=())

    (step,) = AdminService(db_session, admin).save_module_steps(
        module.id,
        [
            StepIn(
                title="Mixed",
                checkpoints=[
                    CheckpointIn(question="  ", options=["A", "B"]),
                    CheckpointIn(question="Only one option", options=["A"]),
                    CheckpointIn(**CHECKPOINT),
                ],
            )
        ],
    )

    assert [(c.question, c.order) for c in step.checkpoints] == [("Pick B", 1)]


def test_out_of_range_correct_option_is_rejected_before_writing(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session, checkpoint_keys=(0,))

    with pytest.raises(ValidationFailedError):
        AdminService(db_session, admin).save_module_steps(
            module.id,
            [StepIn(title="Broken", checkpoints=[{**CHECKPOINT, "correct_option_index": 3}])],
        )

    db_session.rollback()
    assert [step.title for step in db_session.query(ModuleStep).all()] == ["Step 1"]


def test_layout_must_match_block_type():
    with pytest.raises(ValidationError):
        ContentBlockIn(block_type="text", layout={"type": "image", "split_ratio": 0.4})

    block = ContentBlockIn(block_type="image", image_url="/a.png", layout={"type": "image"})
    assert block.layout.split_ratio == 0.5


def test_layout_is_stored_as_plain_json(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session, checkpoint_keys=())

    (step,) = AdminService(db_session, admin).save_module_steps(
        module.id,
        [
            StepIn(
                title="Media",
                content_blocks=[
                    ContentBlockIn(block_type="video", content="https://video", layout={"type": "video"})
                ],
            )
        ],
    )

    assert step.content_blocks[0].layout == {"type": "video", "autoplay": False, "caption": None}


def test_save_quiz_validates_passing_score(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session)

    for score in (0, 101):
        with pytest.raises(ValidationFailedError) as exc_info:
            AdminService(db_session, admin).save_module_quiz(module.id, QuizSaveIn(passing_score=score))
        assert exc_info.value.message == "Invalid passing score"


def test_save_quiz_keeps_only_complete_questions(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 1))
    kept_id = module.quiz.questions[1].id
    options = ["A", "B", "C", "D"]

    quiz = AdminService(db_session, admin).save_module_quiz(
        module.id,
        QuizSaveIn(
            passing_score=80,
            questions=[
                QuizQuestionIn(question="Three options", options=options[:3]),
                QuizQuestionIn(id=kept_id, question="Kept", options=options, correct_option_index=3),
                QuizQuestionIn(question="New", options=options, correct_option_index=2),
            ],
        ),
    )

    assert quiz.passing_score == 80
    assert [(q.question, q.order, q.correct_option_index) for q in quiz.questions] == [
        ("Kept", 1, 3),
        ("New", 2, 2),
    ]
    assert quiz.questions[0].id == kept_id


def test_stats_report_pass_rate(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    module = create_module_graph(db_session, quiz_keys=(0,))
    create_module_graph(db_session, title="Draft", published=False)

    for answers in ([0], [1], [1]):
        QuizService(db_session, learner.id).submit_attempt(
            QuizAttemptIn(module_id=module.id, quiz_id=module.quiz.id, answers=answers)
        )

    stats = AdminService(db_session, admin).get_stats()
    assert stats.total_modules == 2
    assert stats.published_modules == 1
    assert stats.total_users == 2
    assert stats.total_attempts == 3
    assert stats.pass_rate == 33


def test_user_progress_summary(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    module = create_module_graph(db_session, quiz_keys=(0, 0))
    for answers in ([1, 1], [0, 1], [0, 0]):
        QuizService(db_session, learner.id).submit_attempt(
            QuizAttemptIn(module_id=module.id, quiz_id=module.quiz.id, answers=answers)
        )

    detail = AdminService(db_session, admin).get_user_detail(learner.id)

    assert detail.total_attempts == 3
    assert detail.completed_modules == 1
    assert detail.average_score == 50
    assert [attempt.score for attempt in detail.attempts] == [100, 50, 0]


def test_duplicate_username_is_a_conflict(db_session):
    admin = create_admin(db_session)
    create_user(db_session, username="taken")

    with pytest.raises(ConflictError) as exc_info:
        AdminService(db_session, admin).create_user(UserCreate(username="taken", password="pw"))

    assert exc_info.value.status_code == 409


def test_update_role(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    service = AdminService(db_session, admin)

    with pytest.raises(ValidationFailedError):
        service.update_user_role(learner.id, "superuser")
    with pytest.raises(NotFoundError):
        service.update_user_role(999, "admin")

    assert service.update_user_role(learner.id, "admin").role == UserRole.ADMIN


def test_admin_routes_reject_learners(db_session):
    learner = create_user(db_session, username="learner")
    admin = create_admin(db_session)

    with pytest.raises(HTTPException) as exc_info:
        require_admin(current_user=learner)
    assert exc_info.value.status_code == 403
    assert require_admin(current_user=admin) is admin


def _record_attempts(db, user, module, count):
    service = QuizService(db, user.id)
    for index in range(count):
        service.submit_attempt(
            QuizAttemptIn(module_id=module.id, quiz_id=module.quiz.id, answers=[index % 2])
        )


def test_recent_attempts_are_capped_and_newest_first(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    module = create_module_graph(db_session, quiz_keys=(0,))
    _record_attempts(db_session, learner, module, 12)
    service = AdminService(db_session, admin)

    everything = service.list_attempts()
    recent = service.list_attempts(recent_only=True)

    assert len(everything) == 12
    all_ids = sorted((attempt.id for attempt in everything), reverse=True)
    assert [attempt.id for attempt in everything] == all_ids
    assert [attempt.id for attempt in recent] == all_ids[:10]
    assert recent[0].user.username == "learner"
    assert recent[0].module.title == "Module"


def test_module_attempts_are_filtered_by_module(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    first = create_module_graph(db_session, title="First", quiz_keys=(0,))
    second = create_module_graph(db_session, title="Second", quiz_keys=(0,))
    _record_attempts(db_session, learner, first, 2)
    _record_attempts(db_session, learner, second, 3)
    service = AdminService(db_session, admin)

    attempts = service.list_module_attempts(second.id)

    assert len(attempts) == 3
    assert {attempt.module_id for attempt in attempts} == {second.id}
    with pytest.raises(NotFoundError):
        service.list_module_attempts(999)


def test_delete_module_removes_its_whole_tree(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    module = create_module_graph(db_session, checkpoint_keys=(0, 1), quiz_keys=(0, 1))
    kept = create_module_graph(db_session, title="Kept", checkpoint_keys=(0,), quiz_keys=(0,))
    create_pathway(db_session, modules=[module, kept])
    ProgressionService(db_session, learner.id).submit_step_checkpoint(module.steps[0].id, 0)
    QuizService(db_session, learner.id).submit_attempt(
        QuizAttemptIn(module_id=module.id, quiz_id=module.quiz.id, answers=[0, 1])
    )
    module_id = module.id

    AdminService(db_session, admin).delete_module(module_id)

    assert db_session.get(Module, module_id) is None
    assert db_session.query(ModuleStep).filter_by(module_id=module_id).count() == 0
    assert db_session.query(ModuleStep).count() == 1
    assert db_session.query(StepContentBlock).count() == 1
    assert db_session.query(StepCheckpoint).count() == 1
    assert db_session.query(UserStepProgress).count() == 0
    assert db_session.query(Quiz).count() == 1
    assert db_session.query(QuizQuestion).count() == 1
    assert db_session.query(QuizAttempt).count() == 0
    assert [link.module_id for link in db_session.query(PathwayModule).all()] == [kept.id]
    assert db_session.get(User, learner.id) is not None


def test_update_and_delete_group(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    group = create_group(db_session, members=[learner])
    pathway = create_pathway(db_session)
    service = AdminService(db_session, admin)
    service.assign_pathway_to_group(pathway.id, group.id)

    updated = service.update_group(group.id, GroupUpdate(name="Renamed"))
    assert updated.name == "Renamed"
    assert updated.member_count == 1

    service.delete_group(group.id)

    assert db_session.query(UserGroup).count() == 0
    assert db_session.query(GroupMember).count() == 0
    assert db_session.query(GroupPathwayAssignment).count() == 0
    assert db_session.get(User, learner.id) is not None
    with pytest.raises(NotFoundError):
        service.update_group(group.id, GroupUpdate(name="Gone"))


def test_unassign_pathway_from_group_and_user(db_session):
    admin = create_admin(db_session)
    learner = create_user(db_session, username="learner")
    group = create_group(db_session, members=[learner])
    pathway = create_pathway(db_session)
    service = AdminService(db_session, admin)
    service.assign_pathway_to_group(pathway.id, group.id)
    service.assign_pathway_to_user(pathway.id, learner.id)

    service.unassign_pathway_from_group(pathway.id, group.id)
    assert len(PathwayService(db_session, learner.id).get_user_assigned_pathways()) == 1

    service.unassign_pathway_from_user(pathway.id, learner.id)
    assert PathwayService(db_session, learner.id).get_user_assigned_pathways() == []
    assert db_session.query(UserPathwayAssignment).count() == 0

    # Removing a missing assignment is a no-op.
    service.unassign_pathway_from_user(pathway.id, learner.id)


def test_incomplete_existing_question_is_left_untouched(db_session):
    admin = create_admin(db_session)
    module = create_module_graph(db_session, quiz_keys=(0, 1))
    first_id, second_id = [question.id for question in module.quiz.questions]
    options = ["A", "B", "C", "D"]

    quiz = AdminService(db_session, admin).save_module_quiz(
        module.id,
        QuizSaveIn(
            passing_score=70,
            questions=[
                QuizQuestionIn(id=first_id, question="Edited", options=options[:2]),
                QuizQuestionIn(id=second_id, question="Second", options=options, correct_option_index=2),
            ],
        ),
    )

    stored = {question.id: question for question in quiz.questions}
    assert set(stored) == {first_id, second_id}
    assert stored[first_id].question == "Quiz question 1"
    assert stored[first_id].order == 1
    assert stored[second_id].question == "Second"
    assert stored[second_id].order == 1
