from django.contrib import admin

from submissions.models import QuestionSetSubmission, QuizSubmission, SubmissionAnswer


class QuestionSetSubmissionInline(admin.TabularInline):
    model = QuestionSetSubmission
    extra = 0
    readonly_fields = ("question_set_order", "submitted_at", "score", "total_points", "order_answered", "is_final")
    can_delete = False


class SubmissionAnswerInline(admin.TabularInline):
    model = SubmissionAnswer
    extra = 0
    fields = ("question_set_order", "question", "question_type", "answer", "is_correct", "points_awarded",
              "points_possible")
    readonly_fields = ("question_set_order", "question", "question_type", "answer", "points_possible")
    can_delete = False


class QuizSubmissionAdmin(admin.ModelAdmin):
    list_display = ("id", "quiz", "quiz_taker", "status", "score", "total_points", "percentage", "submitted_at")
    list_filter = ("status", "quiz")
    search_fields = ("quiz__title", "quiz_taker__email")
    readonly_fields = ("version", "percentage", "created_at", "updated_at")
    inlines = [QuestionSetSubmissionInline, SubmissionAnswerInline]


admin.site.register(QuizSubmission, QuizSubmissionAdmin)
