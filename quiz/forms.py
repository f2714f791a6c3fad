from django import forms

# Fields a quiz starts with when the create payload leaves them out
DEFAULT_SETTINGS = {
    "description": "",
    "instructions": "",
    "coverImage": "",
    "isQuizChallenge": False,
    "isOpenQuiz": False,
    "duration": {"hours": 0, "minutes": 30, "seconds": 0},
    "multipleAttempts": False,
    "looseFocus": False,
    "viewAnswer": True,
    "viewResults": True,
    "displayCalculator": False,
}

FIELD_MAP = {
    "title": "title",
    "description": "description",
    "instructions": "instructions",
    "coverImage": "cover_image",
    "isQuizChallenge": "is_quiz_challenge",
    "isOpenQuiz": "is_open_quiz",
    "multipleAttempts": "multiple_attempts",
    "looseFocus": "loose_focus",
    "viewAnswer": "view_answer",
    "viewResults": "view_results",
    "displayCalculator": "display_calculator",
    "hours": "duration_hours",
    "minutes": "duration_minutes",
    "seconds": "duration_seconds",
}


class QuizSettingsForm(forms.Form):
    title = forms.CharField(max_length=255, error_messages={"required": "Quiz title is required"})
    description = forms.CharField(required=False, strip=False)
    instructions = forms.CharField(required=False, strip=False)
    coverImage = forms.CharField(max_length=500, required=False)
    isQuizChallenge = forms.BooleanField(required=False)
    isOpenQuiz = forms.BooleanField(required=False)
    multipleAttempts = forms.BooleanField(required=False)
    looseFocus = forms.BooleanField(required=False)
    viewAnswer = forms.BooleanField(required=False)
    viewResults = forms.BooleanField(required=False)
    displayCalculator = forms.BooleanField(required=False)
    hours = forms.IntegerField(min_value=0)
    minutes = forms.IntegerField(min_value=0, max_value=59)
    seconds = forms.IntegerField(min_value=0, max_value=59)

    @classmethod
    def for_settings(cls, base, incoming):
        """Build a bound form from stored (or default) settings overlaid with the incoming ones."""
        data = {**base, **incoming}
        # permitLoseFocus is the name the quiz builder sends for looseFocus
        if "permitLoseFocus" in incoming:
            data["looseFocus"] = incoming["permitLoseFocus"]

        duration = {**base.get("duration", {})}
        if isinstance(incoming.get("duration"), dict):
            duration.update(incoming["duration"])
        data.update(duration)
        data.pop("duration", None)
        return cls(data)

    def apply_to(self, quiz):
        for key, attribute in FIELD_MAP.items():
            setattr(quiz, attribute, self.cleaned_data[key])
        return quiz
