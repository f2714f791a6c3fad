from django import forms
from django.contrib.auth import get_user_model

User = get_user_model()


class AdminRegistrationForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(min_length=6, error_messages={
        "min_length": "Password must be at least 6 characters",
    })

    def clean_email(self):
        email = self.cleaned_data["email"].strip().lower()
        if User.objects.filter(email__iexact=email).exists() or User.objects.filter(username=email).exists():
            raise forms.ValidationError("Admin already exists")
        return email


class AdminLoginForm(forms.Form):
    email = forms.CharField()
    password = forms.CharField()


class QuizTakerLoginForm(forms.Form):
    email = forms.EmailField()
    accessCode = forms.CharField(max_length=9)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()

    def clean_accessCode(self):
        return self.cleaned_data["accessCode"].strip().upper()
