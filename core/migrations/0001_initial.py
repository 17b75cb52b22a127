import core.validators
import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(error_messages={'unique': 'A user with that email already exists.'}, help_text='Required. Enter a valid email address.', max_length=254, unique=True, verbose_name='email address')),
                ('phone_number', models.CharField(blank=True, default='', help_text='Optional. Enter phone number in international format.', max_length=20, validators=[core.validators.validate_phone_number], verbose_name='phone number')),
                ('role', models.CharField(choices=[('buyer', 'Buyer'), ('seller', 'Seller')], default='buyer', help_text='Whether the account buys or sells waste materials.', max_length=10, verbose_name='role')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the account was created.', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the account was last updated.', verbose_name='updated at')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['email'], name='core_user_email_idx'),
                    models.Index(fields=['role'], name='core_user_role_idx'),
                ],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Listing',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(help_text='Short title of the listing', max_length=200, verbose_name='title')),
                ('description', models.TextField(help_text='Description of the material and its condition', verbose_name='description')),
                ('category', models.CharField(choices=[('Plastic', 'Plastic'), ('Glass', 'Glass'), ('Metal', 'Metal'), ('Paper', 'Paper'), ('Electronics', 'Electronics'), ('Textile', 'Textile')], help_text='Material category', max_length=20, verbose_name='category')),
                ('quantity', models.DecimalField(decimal_places=2, help_text='Total amount on offer', max_digits=12, verbose_name='quantity')),
                ('unit', models.CharField(choices=[('kg', 'Kilograms'), ('tons', 'Tons'), ('units', 'Units')], default='kg', help_text='Unit the quantity is measured in', max_length=10, verbose_name='unit')),
                ('price', models.DecimalField(decimal_places=2, help_text='Price for the whole lot', max_digits=12, verbose_name='price')),
                ('address', models.CharField(blank=True, default='', help_text='Pickup address', max_length=300, verbose_name='address')),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name='latitude')),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True, verbose_name='longitude')),
                ('images', models.JSONField(blank=True, default=list, help_text='List of image URLs', validators=[core.validators.validate_image_urls], verbose_name='images')),
                ('status', models.CharField(choices=[('available', 'Available'), ('sold', 'Sold')], default='available', help_text='Availability of the listing', max_length=20, verbose_name='status')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the listing was created', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the listing was last updated', verbose_name='updated at')),
                ('seller', models.ForeignKey(help_text='Seller offering this lot', on_delete=django.db.models.deletion.CASCADE, related_name='listings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'listing',
                'verbose_name_plural': 'listings',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['seller'], name='core_listing_seller_idx'),
                    models.Index(fields=['category'], name='core_listing_category_idx'),
                    models.Index(fields=['created_at'], name='core_listing_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PurchaseRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('quantity', models.DecimalField(decimal_places=2, help_text='Requested amount', max_digits=12, verbose_name='quantity')),
                ('total_price', models.DecimalField(decimal_places=2, help_text='Price for the requested amount', max_digits=14, verbose_name='total price')),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('ACCEPTED', 'Accepted'), ('REJECTED', 'Rejected')], default='PENDING', help_text='Current status of the request', max_length=10, verbose_name='status')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when the request was created', verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when the request was last updated', verbose_name='updated at')),
                ('buyer', models.ForeignKey(help_text='User requesting to buy', on_delete=django.db.models.deletion.PROTECT, related_name='purchases', to=settings.AUTH_USER_MODEL)),
                ('listing', models.ForeignKey(blank=True, help_text='Listing being requested', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='purchase_requests', to='core.listing')),
                ('seller', models.ForeignKey(help_text='Owner of the listing at request time', on_delete=django.db.models.deletion.PROTECT, related_name='sales', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'purchase request',
                'verbose_name_plural': 'purchase requests',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['buyer', '-created_at'], name='core_pr_buyer_created_idx'),
                    models.Index(fields=['seller', '-created_at'], name='core_pr_seller_created_idx'),
                    models.Index(fields=['status'], name='core_pr_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Inquiry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('message', models.TextField(help_text='Question text', max_length=2000, verbose_name='message')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='created at')),
                ('buyer', models.ForeignKey(help_text='User asking the question', on_delete=django.db.models.deletion.CASCADE, related_name='sent_inquiries', to=settings.AUTH_USER_MODEL)),
                ('listing', models.ForeignKey(help_text='Listing the question is about', on_delete=django.db.models.deletion.CASCADE, related_name='inquiries', to='core.listing')),
                ('seller', models.ForeignKey(help_text='Owner of the listing', on_delete=django.db.models.deletion.CASCADE, related_name='received_inquiries', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'inquiry',
                'verbose_name_plural': 'inquiries',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['listing'], name='core_inquiry_listing_idx'),
                    models.Index(fields=['seller'], name='core_inquiry_seller_idx'),
                ],
            },
        ),
    ]
