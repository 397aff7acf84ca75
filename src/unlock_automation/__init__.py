"""Device-unlock portal automation.

Submits unlock requests to the carrier portal and checks their status by
driving a headless browser through the portal's forms.
"""

__version__ = "0.1.0"
