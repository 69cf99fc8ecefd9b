import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Tag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=64, unique=True)),
            ],
            options={
                'db_table': 'note_tag',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Note',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=255)),
                ('subject', models.CharField(db_index=True, max_length=120)),
                ('class_name', models.CharField(db_column='class', db_index=True, max_length=120)),
                ('unit', models.CharField(max_length=120)),
                ('description', models.TextField()),
                ('content', models.TextField()),
                ('file_path', models.CharField(editable=False, help_text='Generated name of the file inside the upload directory', max_length=255)),
                ('file_url', models.CharField(editable=False, max_length=512)),
                ('file_name', models.CharField(editable=False, help_text='Original client-side filename, used for downloads', max_length=255)),
                ('file_size', models.BigIntegerField(editable=False)),
                ('thumbnail_url', models.CharField(blank=True, max_length=512)),
                ('reading_time', models.PositiveIntegerField(default=0)),
                ('views', models.PositiveIntegerField(default=0)),
                ('download_count', models.PositiveIntegerField(default=0)),
                ('is_approved', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('uploaded_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='uploaded_notes', to=settings.AUTH_USER_MODEL)),
                ('tags', models.ManyToManyField(blank=True, related_name='notes', to='notes.tag')),
            ],
            options={
                'verbose_name': 'Note',
                'verbose_name_plural': 'Notes',
                'db_table': 'note',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='note',
            index=models.Index(fields=['is_approved', '-created_at'], name='idx_note_approved_created'),
        ),
        migrations.AddIndex(
            model_name='note',
            index=models.Index(fields=['uploaded_by', 'created_at'], name='idx_note_uploader_created'),
        ),
        migrations.CreateModel(
            name='NoteLike',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('note', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='likes', to='notes.note')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='note_likes', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'note_like',
            },
        ),
        migrations.AddConstraint(
            model_name='notelike',
            constraint=models.UniqueConstraint(fields=('user', 'note'), name='uniq_note_like_user_note'),
        ),
        migrations.CreateModel(
            name='NoteDownload',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('downloaded_at', models.DateTimeField(auto_now_add=True)),
                ('note', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='download_records', to='notes.note')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='downloads', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'note_download',
                'ordering': ['-downloaded_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='notedownload',
            constraint=models.UniqueConstraint(fields=('user', 'note'), name='uniq_note_download_user_note'),
        ),
    ]
