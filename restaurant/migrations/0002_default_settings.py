from django.db import migrations


def create_default_settings(apps, schema_editor):
    RestaurantSettings = apps.get_model('restaurant', 'RestaurantSettings')
    RestaurantSettings.objects.get_or_create(pk=1)


class Migration(migrations.Migration):

    dependencies = [
        ('restaurant', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_default_settings, migrations.RunPython.noop),
    ]
