"""Training ledger: completed courses and current enrollments."""

from ...shared.base import utc_now
from ...shared.exceptions import NotFoundError, ValidationError
from ..entities.skill_record import CompletedCourse, CourseEnrollment, SkillRecord


class TrainingLedger:
    """Domain service for a skill record's training section."""

    @staticmethod
    def add_completed_course(record: SkillRecord, course: CompletedCourse) -> CompletedCourse:
        training = record.training
        training.courses_completed = [*training.courses_completed, course]
        return course

    @staticmethod
    def add_enrollment(record: SkillRecord, enrollment: CourseEnrollment) -> CourseEnrollment:
        training = record.training
        training.currently_enrolled = [*training.currently_enrolled, enrollment]
        return enrollment

    @staticmethod
    def update_progress(
        record: SkillRecord, course_id: str, progress: float
    ) -> CompletedCourse | None:
        """
        Update enrollment progress, completing the course at 100.

        Args:
            record: Skill record to mutate
            course_id: Enrollment course id
            progress: New progress percentage

        Returns:
            The completed course when progress reached 100, otherwise None

        Raises:
            ValidationError: Negative progress
            NotFoundError: No enrollment for ``course_id``
        """
        if progress < 0:
            raise ValidationError(
                "Progress cannot be negative", details={"progress": progress}
            )

        training = record.training
        enrollment = training.find_enrollment(course_id)
        if enrollment is None:
            raise NotFoundError(
                "Course enrollment not found", details={"course_id": course_id}
            )

        if progress >= 100:
            completed = CompletedCourse(
                course_id=enrollment.course_id,
                course_name=enrollment.course_name or enrollment.course_id,
                provider=enrollment.provider,
                completed_at=utc_now(),
            )
            training.currently_enrolled = [
                e for e in training.currently_enrolled if e.course_id != course_id
            ]
            training.courses_completed = [*training.courses_completed, completed]
            return completed

        enrollment.progress = progress
        return None
