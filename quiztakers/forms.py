from django import forms

from questionsets.models import QuestionSet
from quiztakers.models import ACCOUNT_TYPE_CHOICES, PREMIUM, QuizTaker, combination_errors


class QuestionSetCombinationField(forms.Field):
    def to_python(self, value):
        if value in self.empty_values:
            return []
        return value

    def validate(self, value):
        super().validate(value)
        errors = combination_errors(value)
        if errors:
            raise forms.ValidationError(errors)
        if value and QuestionSet.objects.filter(pk__in=value).count() != len(value):
            raise forms.ValidationError("One or more question sets not found")


class QuizTakerForm(forms.Form):
    email = forms.EmailField(error_messages={"required": "Please provide an email address"})
    name = forms.CharField(max_length=255, required=False)
    accountType = forms.ChoiceField(choices=ACCOUNT_TYPE_CHOICES, required=False)
    isActive = forms.BooleanField(required=False)
    questionSetCombination = QuestionSetCombinationField(required=False)

    def __init__(self, *args, instance=None, **kwargs):
        self.instance = instance
        super().__init__(*args, **kwargs)

    @classmethod
    def for_update(cls, instance, incoming):
        data = {
            "email": instance.email,
            "name": instance.name,
            "accountType": instance.account_type,
            "isActive": instance.is_active,
            "questionSetCombination": instance.question_set_combination,
        }
        data.update({key: value for key, value in incoming.items() if key in data})
        return cls(data, instance=instance)

    @classmethod
    def for_create(cls, incoming):
        return cls({"accountType": PREMIUM, "isActive": True, **incoming})

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        others = QuizTaker.objects.filter(email=email)
        if self.instance is not None:
            others = others.exclude(pk=self.instance.pk)
        if others.exists():
            raise forms.ValidationError("Quiz taker with this email already exists")
        return email

    def clean_accountType(self):
        return self.cleaned_data["accountType"] or PREMIUM

    def apply_to(self, quiz_taker):
        quiz_taker.email = self.cleaned_data["email"]
        quiz_taker.name = self.cleaned_data["name"].strip()
        quiz_taker.account_type = self.cleaned_data["accountType"]
        quiz_taker.is_active = self.cleaned_data["isActive"]
        quiz_taker.question_set_combination = self.cleaned_data["questionSetCombination"]
        return quiz_taker


class AssignQuizForm(forms.Form):
    quizId = forms.IntegerField(min_value=1, error_messages={"required": "Please provide a quiz id"})
