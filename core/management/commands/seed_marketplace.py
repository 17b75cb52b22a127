# Seed Marketplace Management Command
import random
from decimal import Decimal

from django.apps import apps
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from faker import Faker

from core.exceptions import MarketplaceError
from core.models import Listing, PurchaseRequest, User

DEMO_PASSWORD = 'password123'

DEMO_USERS = [
    {
        'username': 'buyer1',
        'email': 'buyer@example.com',
        'phone_number': '555-0101',
        'role': User.ROLE_BUYER,
    },
    {
        'username': 'seller1',
        'email': 'seller@example.com',
        'phone_number': '555-0102',
        'role': User.ROLE_SELLER,
    },
]

DEMO_LISTINGS = [
    {
        'title': '50kg Mixed Glass Bottles',
        'description': 'Assorted glass bottles, rinsed and sorted by color. Ready for pickup.',
        'category': 'Glass',
        'quantity': Decimal('50'),
        'unit': 'kg',
        'price': Decimal('15.00'),
        'address': 'New York, NY',
        'latitude': Decimal('40.712800'),
        'longitude': Decimal('-74.006000'),
        'images': ['https://images.unsplash.com/photo-1605600659908-0ef719419d41'],
    },
    {
        'title': '100 Plastic Crates',
        'description': 'High density polyethylene crates. Good condition.',
        'category': 'Plastic',
        'quantity': Decimal('100'),
        'unit': 'units',
        'price': Decimal('200.00'),
        'address': 'Tribeca, NY',
        'latitude': Decimal('40.720000'),
        'longitude': Decimal('-74.010000'),
        'images': ['https://images.unsplash.com/photo-1611284446314-60a58ac0deb9'],
    },
]

MATERIALS = {
    'Plastic': ['PET bottles', 'HDPE drums', 'LDPE film', 'Plastic crates'],
    'Glass': ['Clear glass cullet', 'Amber bottles', 'Window glass offcuts'],
    'Metal': ['Aluminium cans', 'Copper wire', 'Steel scrap', 'Brass fittings'],
    'Paper': ['Corrugated cardboard', 'Office paper', 'Newsprint bales'],
    'Electronics': ['Circuit boards', 'Old laptops', 'Mixed cables'],
    'Textile': ['Cotton offcuts', 'Denim scraps', 'Polyester rolls'],
}


class Command(BaseCommand):
    help = 'Seeds the marketplace with demo accounts, listings and purchase requests.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--buyers',
            type=int,
            default=0,
            help='Number of extra buyer accounts to generate.',
        )
        parser.add_argument(
            '--sellers',
            type=int,
            default=0,
            help='Number of extra seller accounts to generate.',
        )
        parser.add_argument(
            '--listings',
            type=int,
            default=0,
            help='Number of extra listings to generate across sellers.',
        )
        parser.add_argument(
            '--purchases',
            type=int,
            default=0,
            help='Number of purchase requests to generate.',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='Random seed for reproducible data.',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Run the command without saving changes to the database.',
        )

    def handle(self, *args, **options):
        for name in ('buyers', 'sellers', 'listings', 'purchases'):
            if options[name] < 0:
                raise CommandError(f'--{name} cannot be negative.')

        self.fake = Faker()
        if options['seed'] is not None:
            Faker.seed(options['seed'])
            random.seed(options['seed'])

        dry_run = options['dry_run']

        with transaction.atomic():
            buyer, seller = self.create_demo_data()
            buyers = [buyer] + self.create_users(User.ROLE_BUYER, options['buyers'])
            sellers = [seller] + self.create_users(User.ROLE_SELLER, options['sellers'])
            listings = self.create_listings(sellers, options['listings'])
            self.create_purchases(buyers, listings, options['purchases'])

            if dry_run:
                transaction.set_rollback(True)

        if dry_run:
            self.stdout.write(self.style.SUCCESS('Dry run completed. No changes saved.'))
        else:
            self.stdout.write(self.style.SUCCESS('Seeding completed successfully.'))

    def create_demo_data(self):
        """Create the demo buyer, seller and listings unless they already exist."""
        accounts = {}
        for data in DEMO_USERS:
            user = User.objects.filter(username=data['username']).first()
            if user is None:
                user = User.objects.create_user(password=DEMO_PASSWORD, **data)
                self.stdout.write(f"Created demo {data['role']} {user.username}")
            else:
                self.stdout.write(f"Demo {data['role']} {user.username} already exists")
            accounts[data['role']] = user

        seller = accounts[User.ROLE_SELLER]
        for data in DEMO_LISTINGS:
            _, created = Listing.objects.get_or_create(
                seller=seller,
                title=data['title'],
                defaults=data,
            )
            if created:
                self.stdout.write(f"Created demo listing {data['title']}")

        return accounts[User.ROLE_BUYER], seller

    def create_users(self, role, count):
        users = []
        for _ in range(count):
            email = self.fake.unique.email()
            user = User.objects.create_user(
                username=f"{email.split('@')[0]}{self.fake.unique.random_int(1000, 9999)}",
                email=email,
                password=DEMO_PASSWORD,
                first_name=self.fake.first_name(),
                last_name=self.fake.last_name(),
                phone_number=self.fake.numerify('555-####'),
                role=role,
            )
            users.append(user)

        if count:
            self.stdout.write(f'Created {count} {role} accounts.')
        return users

    def create_listings(self, sellers, count):
        for _ in range(count):
            category = random.choice(list(MATERIALS))
            unit = random.choice(['kg', 'tons', 'units'])
            quantity = Decimal(random.randint(5, 500))
            Listing.objects.create(
                seller=random.choice(sellers),
                title=f'{quantity} {unit} {random.choice(MATERIALS[category])}',
                description=self.fake.paragraph(nb_sentences=3),
                category=category,
                quantity=quantity,
                unit=unit,
                price=Decimal(random.randint(500, 50000)) / 100,
                address=self.fake.address().replace('\n', ', ')[:300],
                latitude=Decimal(str(self.fake.latitude())).quantize(Decimal('0.000001')),
                longitude=Decimal(str(self.fake.longitude())).quantize(Decimal('0.000001')),
                images=[],
            )

        if count:
            self.stdout.write(f'Created {count} listings.')
        return list(Listing.objects.all())

    def create_purchases(self, buyers, listings, count):
        """Create purchase requests through the lifecycle manager and decide some."""
        if not count:
            return
        if not listings:
            raise CommandError('Cannot create purchase requests without listings.')

        lifecycle = apps.get_app_config('core').purchase_lifecycle
        created = 0

        for _ in range(count):
            listing = random.choice(listings)
            quantity = (listing.quantity * Decimal(random.randint(1, 100)) / 100).quantize(Decimal('0.01'))
            if quantity <= 0:
                quantity = listing.quantity

            try:
                purchase = lifecycle.create_purchase_request(
                    buyer_id=random.choice(buyers).id,
                    listing_id=listing.id,
                    requested_quantity=quantity,
                )
                decision = random.choice([
                    None,
                    PurchaseRequest.STATUS_ACCEPTED,
                    PurchaseRequest.STATUS_REJECTED,
                ])
                if decision:
                    lifecycle.update_status(listing.seller_id, purchase.id, decision)
            except MarketplaceError as e:
                self.stderr.write(f'Skipped purchase on listing {listing.id}: {e.message}')
                continue
            created += 1

        self.stdout.write(f'Created {created} purchase requests.')
