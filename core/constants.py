"""
Domain constants shared across apps.
"""

from django.utils.translation import gettext_lazy as _

# Trades an artisan can practise and an emergency can require.
TRADES = [
    'Plomberie',
    'Électricité',
    'Serrurerie',
    'Couverture',
    'Chauffage',
    'Menuiserie',
    'Maçonnerie',
    'Peinture',
    'Vitrerie',
    'Climatisation',
]

TRADE_CHOICES = [(trade, _(trade)) for trade in TRADES]

# Paris arrondissements served by the platform.
ARRONDISSEMENT_MIN = 1
ARRONDISSEMENT_MAX = 20
ARRONDISSEMENTS = list(range(ARRONDISSEMENT_MIN, ARRONDISSEMENT_MAX + 1))

PHOTO_PHASES = ('before', 'during', 'after')
