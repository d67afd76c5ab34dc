from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, StringField, TextAreaField
from wtforms.validators import URL, AnyOf, DataRequired, Length, Optional, Regexp, StopValidation

from luma.errors import MalformedInput
from luma.models import COMMENT_CONTEXTS, EditorialState, IdeaState

EDITORIAL_STATES = [s.value for s in EditorialState]
IDEA_STATES = [s.value for s in IdeaState]


class SubjectForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(message='Enter a title'), Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])


class TrainingForm(SubjectForm):
    subject_id = StringField('Subject', name='subjectId',
                             validators=[DataRequired(message='Choose a subject')])


class ModuleForm(SubjectForm):
    training_id = StringField('Training', name='trainingId',
                              validators=[DataRequired(message='Choose a training')])


class TopicForm(SubjectForm):
    training_module_id = StringField('Module', name='trainingModuleId',
                                     validators=[DataRequired(message='Choose a module')])
    owner_id = StringField('Owner', name='ownerId', validators=[Optional()])


class UnitForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(message='Enter a title'), Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])
    topic_id = StringField('Topic', name='topicId', validators=[Optional()])
    editorial_state = StringField('State', name='editorialState',
                                  validators=[Optional(), AnyOf(EDITORIAL_STATES)])
    target_date = StringField('Target date', name='targetDate', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
    speech_text = TextAreaField('Speech text', name='speechText', validators=[Optional()])
    explanation = TextAreaField('Explanation', validators=[Optional()])


class StateForm(FlaskForm):
    state = StringField('State', validators=[DataRequired(message='Choose a state'), AnyOf(EDITORIAL_STATES)])


class IdeaForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(message='Enter a title'), Length(max=200)])
    description = TextAreaField('Description', validators=[Optional()])
    state = StringField('State', validators=[Optional(), AnyOf(IDEA_STATES)])


class IdeaMoveForm(FlaskForm):
    state = StringField('State', validators=[DataRequired(message='Choose a state'), AnyOf(IDEA_STATES)])


class TagForm(FlaskForm):
    label = StringField('Label', validators=[DataRequired(message='Enter a label'), Length(max=50)])
    color = StringField('Color', validators=[
        Optional(), Regexp(r'^#[0-9A-Fa-f]{6}$', message='Use a #RRGGBB color')])


class CommentForm(FlaskForm):
    content = TextAreaField('Comment', validators=[DataRequired(message='Enter a comment')])
    context = StringField('Context', validators=[Optional(), AnyOf(COMMENT_CONTEXTS)])


class CommentFlagsForm(FlaskForm):
    content = TextAreaField('Comment', validators=[Optional()])
    is_for_discussion = BooleanField('For discussion', name='isForDiscussion')
    is_processed = BooleanField('Processed', name='isProcessed')


class UrlForm(FlaskForm):
    title = StringField('Title', validators=[Optional(), Length(max=200)])
    url = StringField('URL', validators=[DataRequired(message='Enter a URL'), URL(message='Enter a valid URL')])


class GoalForm(FlaskForm):
    text = StringField('Learning goal', validators=[DataRequired(message='Enter a goal')])


class TextForm(FlaskForm):
    text = TextAreaField('Text', validators=[DataRequired(message='Enter some text')])


class SnippetForm(FlaskForm):
    content = TextAreaField('Content', validators=[Optional()])
    order = IntegerField('Order', validators=[Optional()])
    image_id = StringField('Image', name='imageId', validators=[Optional()])


def sent(form, field):
    """Require the key to be present; unlike InputRequired a false value passes."""
    if not field.raw_data:
        raise StopValidation('This field is required.')


class VoteForm(FlaskForm):
    is_upvote = BooleanField('Upvote', name='isUpvote', validators=[sent])


def validated(form_cls, partial=False):
    """Bind the request body to ``form_cls``; raises MalformedInput on errors.

    With ``partial`` only fields present in the body are checked, so a PATCH
    may omit required fields it does not change.
    """
    form = form_cls()
    if form.validate_on_submit():
        return form
    errors = form.errors
    if partial:
        errors = {
            name: messages for name, messages in errors.items()
            if name is None or name == 'csrf_token' or form[name].raw_data
        }
    if errors or not form.is_submitted():
        raise MalformedInput(errors)
    return form


def submitted(form):
    """Field values that were actually present in the request, by attribute name."""
    return {
        name: value for name, value in form.data.items()
        if name != 'csrf_token' and getattr(form, name).raw_data
    }
