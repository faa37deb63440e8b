from countdown import db


class SubscriptionEvent(db.Model):
    """Accepted sub, resub or gifted sub with the timer value right after it."""
    __tablename__ = 'subs'
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)
    ending_at = db.Column(db.BigInteger, nullable=False)
    seconds_per_sub = db.Column(db.Float, nullable=False)
    plan = db.Column(db.String(16), nullable=False, default='undefined')
    user_name = db.Column(db.String(64), nullable=True)

    def to_dict(self):
        return {
            'kind': 'subscription',
            'timestamp': self.timestamp,
            'ending_at': self.ending_at,
            'seconds': self.seconds_per_sub,
            'plan': self.plan,
            'user_name': self.user_name,
        }


class SubBomb(db.Model):
    __tablename__ = 'sub_bombs'
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)
    amount_subs = db.Column(db.Integer, nullable=False)
    plan = db.Column(db.String(16), nullable=False, default='undefined')
    user_name = db.Column(db.String(64), nullable=True)

    def to_dict(self):
        return {
            'kind': 'sub_bomb',
            'timestamp': self.timestamp,
            'amount_subs': self.amount_subs,
            'plan': self.plan,
            'user_name': self.user_name,
        }


class CheerEvent(db.Model):
    __tablename__ = 'cheers'
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)
    ending_at = db.Column(db.BigInteger, nullable=False)
    amount_bits = db.Column(db.Integer, nullable=False)
    user_name = db.Column(db.String(64), nullable=True)

    def to_dict(self):
        return {
            'kind': 'cheer',
            'timestamp': self.timestamp,
            'ending_at': self.ending_at,
            'bits': self.amount_bits,
            'user_name': self.user_name,
        }


class GraphSample(db.Model):
    __tablename__ = 'graph'
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)
    ending_at = db.Column(db.BigInteger, nullable=False)

    def to_dict(self):
        return {'timestamp': self.timestamp, 'ending_at': self.ending_at}


class Setting(db.Model):
    __tablename__ = 'settings'
    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.BigInteger, nullable=True)
