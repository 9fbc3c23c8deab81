from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

CATEGORY_SINGLE = "single"
CATEGORY_PARLAY = "parlay"
CATEGORY_CHOICES = [(CATEGORY_SINGLE, "Single"), (CATEGORY_PARLAY, "Parlay")]


class Prediction(models.Model):
    home_team = models.CharField(max_length=100)
    away_team = models.CharField(max_length=100)
    match_date = models.CharField(max_length=40)  # loosely formatted, usually YYYY-MM-DDTHH:MM
    league = models.CharField(max_length=100)
    prediction = models.CharField(max_length=200)  # e.g. "Home Win", "Over 2.5"
    odds = models.DecimalField(max_digits=7, decimal_places=2, validators=[MinValueValidator(1)])
    confidence = models.PositiveSmallIntegerField(validators=[MaxValueValidator(100)])
    analysis = models.TextField(blank=True)
    category = models.CharField(max_length=10, choices=CATEGORY_CHOICES, default=CATEGORY_SINGLE)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.home_team} vs {self.away_team} ({self.prediction})"

    def as_dict(self):
        return {
            "id": self.id,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "match_date": self.match_date,
            "league": self.league,
            "prediction": self.prediction,
            "odds": float(self.odds),
            "confidence": self.confidence,
            "analysis": self.analysis,
            "category": self.category,
        }


class AdminSession(models.Model):
    token = models.CharField(max_length=64, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField()

    def __str__(self):
        return f"AdminSession(expires {self.expires_at.isoformat()})"
