from django.contrib import admin
from django.db.models import Count

from quiz.models import Quiz, QuizQuestion, QuizQuestionSet


class QuizQuestionSetInline(admin.TabularInline):
    model = QuizQuestionSet
    extra = 0
    fields = ("order", "question_set", "title", "total_points")
    readonly_fields = fields
    can_delete = False


class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "created_by", "is_active", "is_open_quiz", "is_quiz_challenge", "total_points",
                    "submission_count")
    list_filter = ("is_active", "is_open_quiz", "is_quiz_challenge")
    search_fields = ("title", "created_by__email")
    readonly_fields = ("total_points", "question_set_combination", "created_at", "updated_at")
    inlines = [QuizQuestionSetInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(submission_count=Count("submissions"))

    @admin.display(ordering="submission_count")
    def submission_count(self, obj):
        return obj.submission_count


class QuizQuestionAdmin(admin.ModelAdmin):
    list_display = ("question_text", "type", "points", "quiz_question_set")
    list_filter = ("type",)


admin.site.register(Quiz, QuizAdmin)
admin.site.register(QuizQuestion, QuizQuestionAdmin)
