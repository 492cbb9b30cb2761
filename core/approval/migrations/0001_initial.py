import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('user_accounts', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ApprovalWorkflow',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=120)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='approval_workflows', to='user_accounts.department')),
            ],
            options={
                'db_table': 'approval_workflow',
                'ordering': ['department', 'name', 'id'],
            },
        ),
        migrations.CreateModel(
            name='WorkflowRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order_index', models.PositiveIntegerField(help_text='1-based evaluation order')),
                ('conditions', models.JSONField(default=list, help_text='List of {"field", "operator", "value"} objects')),
                ('logic', models.CharField(choices=[('AND', 'All conditions must hold'), ('OR', 'Any condition may hold')], default='AND', max_length=3)),
                ('approver_role', models.CharField(help_text='Job role code whose holders must approve', max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('workflow', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rules', to='approval.approvalworkflow')),
            ],
            options={
                'db_table': 'approval_workflow_rule',
                'ordering': ['workflow', 'order_index'],
                'unique_together': {('workflow', 'order_index')},
            },
        ),
    ]
