"""Forms for the ticket store.

These validate the raw strings a buyer types in before anything reaches the
pricing engine.
"""

from decimal import Decimal

from django import forms

HEARD_FROM_CHOICES = [
    ("friend-or-acquaintance", "Friend or Acquaintance"),
    ("i-was-there-last-year", "I was there last year"),
    ("lesswrong", "LessWrong"),
    ("ea-forum", "EA Forum"),
    ("manifold", "Manifold"),
    ("lightcone", "Lightcone"),
    ("twitter", "Twitter"),
    ("acx", "ACX"),
    ("other-blog", "Other Blog"),
    ("newsletter", "Newsletter"),
    ("podcast", "Podcast"),
    ("discord", "Discord"),
    ("tumblr", "Tumblr"),
    ("twitch", "Twitch"),
    ("other", "Other"),
]

DIETARY_CHOICES = [
    ("no-restrictions", "No restrictions"),
    ("vegetarian", "Vegetarian"),
    ("vegan", "Vegan"),
    ("pescatarian", "Pescatarian"),
    ("gluten-free", "Gluten-free"),
    ("dairy-free", "Dairy-free"),
    ("nut-free", "Nut-free"),
    ("low-carb", "Low-carb"),
    ("other", "Other"),
]

YES_NO_CHOICES = [("yes", "Yes"), ("no", "No")]


class PointGrantForm(forms.Form):
    """LessWrong karma discount input.

    ``DecimalField`` rejects non-numeric, ``NaN`` and infinite input, so a
    garbled points value is treated the same as a missing one.
    """

    username = forms.CharField(max_length=200, strip=True)
    points = forms.DecimalField(min_value=Decimal(0))


class FlatGrantForm(forms.Form):
    """Manifold mana discount input."""

    username = forms.CharField(max_length=200, strip=True)


class AttendeeForm(forms.Form):
    """Attendee details collected before checkout.

    Only structural checks happen here. Completeness rules that depend on
    the cart (which "heard from" answers are needed) live in
    :func:`festival_tickets.store.services.checkout.validate_attendee`, so
    every field is optional at the form level.
    """

    first_name = forms.CharField(max_length=200, required=False, strip=True)
    last_name = forms.CharField(max_length=200, required=False, strip=True)
    badge_name = forms.CharField(max_length=200, required=False, strip=True)
    manifold_username = forms.CharField(max_length=200, required=False, strip=True)
    lw_username = forms.CharField(max_length=200, required=False, strip=True)
    dietary_preferences = forms.MultipleChoiceField(choices=DIETARY_CHOICES, required=False)
    dietary_other = forms.CharField(max_length=500, required=False, strip=True)
    heard_from_manifest = forms.ChoiceField(choices=[("", "Select an option"), *HEARD_FROM_CHOICES], required=False)
    heard_from_lessonline = forms.ChoiceField(choices=[("", "Select an option"), *HEARD_FROM_CHOICES], required=False)
    under_18 = forms.ChoiceField(choices=[("", ""), *YES_NO_CHOICES], required=False)
    bringing_kids = forms.ChoiceField(choices=[("", ""), *YES_NO_CHOICES], required=False)
