from django import forms

from .imports import COMPETITIONS, DEFAULT_COMPETITION, DEFAULT_CONFIDENCE
from .models import CATEGORY_CHOICES, CATEGORY_SINGLE

REQUIRED_MESSAGE = "Please fill in all required fields."


class PredictionForm(forms.Form):
    home_team = forms.CharField(max_length=100)
    away_team = forms.CharField(max_length=100)
    match_date = forms.CharField(max_length=40)
    league = forms.CharField(max_length=100)
    prediction = forms.CharField(max_length=200)
    odds = forms.DecimalField(min_value=1, max_digits=7, decimal_places=2)
    confidence = forms.IntegerField(min_value=0, max_value=100, initial=DEFAULT_CONFIDENCE)
    analysis = forms.CharField(required=False, widget=forms.Textarea)
    category = forms.ChoiceField(choices=CATEGORY_CHOICES, initial=CATEGORY_SINGLE, required=False)

    def clean_category(self):
        return self.cleaned_data.get("category") or CATEGORY_SINGLE

    @classmethod
    def initial_from_prediction(cls, p):
        return {
            "home_team": p["home_team"],
            "away_team": p["away_team"],
            "match_date": p["match_date"],
            "league": p["league"],
            "prediction": p["prediction"],
            "odds": str(p["odds"]),
            "confidence": str(int(p["confidence"])),
            "analysis": p.get("analysis") or "",
            "category": p.get("category") or CATEGORY_SINGLE,
        }


class LoginForm(forms.Form):
    password = forms.CharField(widget=forms.PasswordInput)


class ImportForm(forms.Form):
    competition = forms.ChoiceField(choices=COMPETITIONS, initial=DEFAULT_COMPETITION)
