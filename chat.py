'''
chat.py -- plain text rendering of structured chat messages (the JSON text
components servers send for signs).
'''

import json


class ChatMessage(object):
    """ A chat component: a string, a list of components or a mapping with
    `text`, `translate`/`with` and `extra` fields.

    """
    def __init__(self, message):
        if isinstance(message, ChatMessage):
            message = message.json
        self.json = message

    @classmethod
    def from_json(cls, text):
        return cls(json.loads(text))

    def to_string(self):
        return _flatten(self.json)

    def __str__(self):
        return self.to_string()

    def __repr__(self):
        return 'ChatMessage(%r)' % (self.json,)


def _flatten(component):
    if component is None:
        return ''
    if isinstance(component, str):
        return component
    if isinstance(component, (list, tuple)):
        return ''.join(_flatten(c) for c in component)
    if not isinstance(component, dict):
        return str(component)
    if 'text' in component:
        text = _flatten(component['text'])
    elif 'translate' in component:
        # no translation tables here; show the key followed by its arguments
        args = [_flatten(a) for a in component.get('with', [])]
        text = ' '.join([component['translate']] + args)
    else:
        text = ''
    return text + ''.join(_flatten(c) for c in component.get('extra', []))
