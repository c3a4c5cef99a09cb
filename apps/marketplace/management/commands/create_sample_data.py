"""
Management command to create sample data for trying the API.

Usage:
    python manage.py create_sample_data

This creates:
- 4 members (admin, alma, ben, carla)
- 4 listings owned by alma, three of them discounted
- Share links for ben and carla
- A few prospects, one of them referred through ben's link
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from decimal import Decimal

from apps.accounts.models import User
from apps.marketplace.models import Listing, ListingShare, Prospect, Impression, ListingType, ListingCondition
from apps.marketplace.services import create_listing, get_or_create_share, submit_prospect
from apps.notifications.models import Notification


SAMPLE_LISTINGS = [
    {
        'title': 'Acoustic Guitar',
        'description': 'Yamaha F310, lightly used, with soft case.',
        'category': 'Music',
        'condition': ListingCondition.LIKE_NEW,
        'original_price': Decimal('1000.00'),
        'discounted_price': Decimal('700.00'),
        'love_gift_amount': Decimal('100.00'),
    },
    {
        'title': 'Study Table',
        'description': 'Solid wood, 120 x 60 cm.',
        'category': 'Furniture',
        'condition': ListingCondition.GOOD,
        'original_price': Decimal('2500.00'),
        'discounted_price': Decimal('2200.00'),
        'love_gift_amount': Decimal('150.00'),
    },
    {
        'title': 'Math Tutoring',
        'description': 'Grade school to high school, weekends.',
        'listing_type': ListingType.SERVICE,
        'category': 'Education',
        'original_price': Decimal('500.00'),
        'price_label': 'per session',
    },
    {
        'title': 'Rice Cooker',
        'category': 'Appliances',
        'condition': ListingCondition.NEW,
        'original_price': Decimal('1800.00'),
        'discounted_price': Decimal('1500.00'),
        'love_gift_amount': Decimal('75.00'),
    },
]


class Command(BaseCommand):
    help = 'Create sample marketplace data for trying the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing marketplace data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        listings = self.create_listings(users['alma'])
        shares = self.create_shares(users, listings)
        self.create_prospects(listings, shares)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (superuser)')
        self.stdout.write('  alma@example.com / password123 (seller)')
        self.stdout.write('  ben@example.com / password123 (sharer)')
        self.stdout.write('  carla@example.com / password123 (sharer)')

    def clear_data(self):
        """Clear marketplace data and the sample members."""
        Impression.objects.all().delete()
        Prospect.objects.all().delete()
        ListingShare.objects.all().delete()
        Listing.objects.all().delete()
        Notification.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        User.objects.filter(email='admin@example.com').delete()

    def create_users(self):
        """Create test members."""
        self.stdout.write('  Creating members...')

        admin, _ = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'display_name': 'Admin',
                'is_staff': True,
                'is_superuser': True,
            }
        )
        admin.set_password('admin123')
        admin.save()

        users = {'admin': admin}
        for key, first_name, last_name in [
            ('alma', 'Alma', 'Reyes'),
            ('ben', 'Ben', 'Cruz'),
            ('carla', 'Carla', 'Diaz'),
        ]:
            user, _ = User.objects.get_or_create(
                email=f'{key}@example.com',
                defaults={'first_name': first_name, 'last_name': last_name}
            )
            user.set_password('password123')
            user.save()
            users[key] = user

        return users

    def create_listings(self, seller):
        """Create listings owned by the seller."""
        self.stdout.write('  Creating listings...')

        listings = []
        for data in SAMPLE_LISTINGS:
            existing = Listing.objects.filter(owner=seller, title=data['title']).first()
            listings.append(existing or create_listing(owner=seller, **data))
        return listings

    def create_shares(self, users, listings):
        """Ben shares every discounted listing, Carla shares the first one."""
        self.stdout.write('  Creating share links...')

        shares = {}
        for listing in listings:
            if listing.love_gift_amount > 0:
                shares[(listing.id, 'ben')], _ = get_or_create_share(listing_id=listing.id, member=users['ben'])
        shares[(listings[0].id, 'carla')], _ = get_or_create_share(listing_id=listings[0].id, member=users['carla'])
        return shares

    def create_prospects(self, listings, shares):
        """Create prospects, one referred through Ben's link."""
        self.stdout.write('  Creating prospects...')

        guitar = listings[0]
        submit_prospect(
            listing_id=guitar.id,
            action_type='reveal',
            share_code=shares[(guitar.id, 'ben')].share_code,
            prospect_name='Maria',
            prospect_mobile='09171234567',
            consented=True,
        )
        submit_prospect(
            listing_id=guitar.id,
            action_type='contact',
            prospect_name='Jose',
            prospect_email='jose@example.com',
            consented=True,
        )
        submit_prospect(
            listing_id=listings[1].id,
            action_type='reveal',
            share_code='typo-code',
            prospect_name='Lito',
        )
