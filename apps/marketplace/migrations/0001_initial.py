# Generated manually for marketplace app

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Listing',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('listing_type', models.CharField(choices=[('sell', 'For Sale'), ('buy', 'Wanted'), ('service', 'Service'), ('donate', 'Free / Donate'), ('rent', 'For Rent')], default='sell', max_length=20)),
                ('category', models.CharField(default='Other', max_length=100)),
                ('condition', models.CharField(blank=True, choices=[('new', 'Brand New'), ('like_new', 'Like New'), ('good', 'Good'), ('fair', 'Fair'), ('poor', 'For Parts')], max_length=20)),
                ('location_area', models.CharField(blank=True, max_length=200)),
                ('original_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[MinValueValidator(Decimal('0.00'))])),
                ('discounted_price', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[MinValueValidator(Decimal('0.00'))])),
                ('price_label', models.CharField(blank=True, max_length=100)),
                ('love_gift_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])),
                ('status', models.CharField(choices=[('active', 'Active'), ('sold', 'Sold'), ('removed', 'Removed')], default='active', max_length=20)),
                ('view_count', models.PositiveIntegerField(default=0)),
                ('sold_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='marketplace_listings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'marketplace_listings',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='mkt_listing_status_idx'),
                    models.Index(fields=['owner', 'created_at'], name='mkt_listing_owner_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ListingShare',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('share_code', models.CharField(db_index=True, editable=False, max_length=32, unique=True)),
                ('love_gift_earned', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('credited', 'Credited')], default='pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('listing', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shares', to='marketplace.listing')),
                ('sharer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='listing_shares', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'marketplace_listing_shares',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['sharer', 'created_at'], name='mkt_share_sharer_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('listing', 'sharer'), name='unique_share_per_listing_sharer'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Prospect',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('share_code', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('prospect_name', models.CharField(max_length=200)),
                ('prospect_mobile', models.CharField(blank=True, max_length=30, null=True)),
                ('prospect_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('action_type', models.CharField(choices=[('reveal', 'Reveal price'), ('contact', 'Contact seller')], max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('revealed', 'Revealed'), ('contacted', 'Contacted'), ('converted', 'Converted'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('consented', models.BooleanField(default=False)),
                ('ip_hash', models.CharField(blank=True, max_length=16)),
                ('user_agent', models.CharField(blank=True, max_length=500)),
                ('converted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('listing', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='prospects', to='marketplace.listing')),
                ('sharer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='referred_prospects', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'marketplace_prospects',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['listing', 'created_at'], name='mkt_prospect_listing_idx'),
                    models.Index(fields=['sharer', 'status'], name='mkt_prospect_sharer_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Impression',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('share_code', models.CharField(blank=True, db_index=True, max_length=64, null=True)),
                ('event', models.CharField(choices=[('impression', 'Impression'), ('reveal_click', 'Reveal click'), ('contact_click', 'Contact click')], max_length=20)),
                ('ip_hash', models.CharField(blank=True, max_length=16)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('listing', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='impressions', to='marketplace.listing')),
            ],
            options={
                'db_table': 'marketplace_impressions',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['listing', 'event', 'ip_hash', 'created_at'], name='mkt_impression_dedup_idx'),
                ],
            },
        ),
    ]
