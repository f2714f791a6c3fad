from django.contrib import admin

from questionsets.models import Question, QuestionSet


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    fields = ("order", "type", "question_text", "options", "correct_answer", "points")


class QuestionSetAdmin(admin.ModelAdmin):
    list_display = ("title", "created_by", "is_active", "question_count", "total_points", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("title", "created_by__email")
    readonly_fields = ("question_count", "total_points", "created_at", "updated_at")
    inlines = [QuestionInline]


admin.site.register(QuestionSet, QuestionSetAdmin)
