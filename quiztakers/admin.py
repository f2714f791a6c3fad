from django.contrib import admin

from quiztakers.models import AssignedQuiz, QuestionSetProgress, QuizTakenEntry, QuizTaker


class AssignedQuizInline(admin.TabularInline):
    model = AssignedQuiz
    extra = 0
    fields = ("quiz", "status", "assigned_at", "started_at", "completed_at", "submission")
    readonly_fields = ("status", "started_at", "completed_at", "submission")


class QuizTakenEntryInline(admin.TabularInline):
    model = QuizTakenEntry
    extra = 0
    readonly_fields = ("quiz", "submission", "score", "completed_at")
    can_delete = False


class QuizTakerAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "account_type", "is_active", "access_code", "created_at")
    list_filter = ("account_type", "is_active")
    search_fields = ("email", "name", "access_code")
    readonly_fields = ("version", "created_at")
    inlines = [AssignedQuizInline, QuizTakenEntryInline]


class QuestionSetProgressInline(admin.TabularInline):
    model = QuestionSetProgress
    extra = 0
    readonly_fields = ("slot", "custom_position", "status", "started_at", "completed_at", "score", "total_points")
    can_delete = False


class AssignedQuizAdmin(admin.ModelAdmin):
    list_display = ("quiz_taker", "quiz", "status", "assigned_at", "completed_at")
    list_filter = ("status",)
    search_fields = ("quiz_taker__email", "quiz__title")
    inlines = [QuestionSetProgressInline]


admin.site.register(QuizTaker, QuizTakerAdmin)
admin.site.register(AssignedQuiz, AssignedQuizAdmin)
